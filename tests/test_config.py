import json

import pytest

from monitor_queue.l0_core import InvalidArgument
from monitor_queue.l1_queue.config import QueueConfig, load_queue_config


def test_load_yaml(tmp_path):
    p = tmp_path / "queue.yaml"
    p.write_text("capacity: 8\nname: jobs\nproducers: 3\nconsumers: 2\nitems_per_producer: 50\n",
                 encoding="utf-8")
    cfg = load_queue_config(p)
    assert cfg == QueueConfig(capacity=8, name="jobs", producers=3, consumers=2,
                              items_per_producer=50)


def test_load_json_with_defaults(tmp_path):
    p = tmp_path / "queue.json"
    p.write_text(json.dumps({"capacity": 3}), encoding="utf-8")
    cfg = load_queue_config(p)
    assert cfg.capacity == 3
    assert cfg.producers == 1 and cfg.consumers == 1
    assert cfg.items_per_producer == 10


def test_empty_yaml_gives_defaults(tmp_path):
    p = tmp_path / "empty.yml"
    p.write_text("", encoding="utf-8")
    assert load_queue_config(p) == QueueConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_queue_config(tmp_path / "nope.yaml")


def test_invalid_capacity(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("capacity: 0\n", encoding="utf-8")
    with pytest.raises(InvalidArgument):
        load_queue_config(p)


def test_non_numeric_value(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text('{"producers": "many"}', encoding="utf-8")
    with pytest.raises(InvalidArgument):
        load_queue_config(p)


def test_non_mapping_document(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(InvalidArgument):
        load_queue_config(p)


def test_fractional_value_is_not_truncated(tmp_path):
    p = tmp_path / "frac.yaml"
    p.write_text("capacity: 2.7\n", encoding="utf-8")
    with pytest.raises(InvalidArgument):
        load_queue_config(p)


def test_whole_float_is_accepted(tmp_path):
    p = tmp_path / "whole.json"
    p.write_text('{"capacity": 4.0}', encoding="utf-8")
    assert load_queue_config(p).capacity == 4


@pytest.mark.parametrize("kwargs", [
    {"items_per_producer": "5"},
    {"items_per_producer": -1},
    {"items_per_producer": True},
    {"name": None},
    {"name": "   "},
    {"producers": 1.5},
])
def test_direct_construction_validates_every_field(kwargs):
    with pytest.raises(InvalidArgument):
        QueueConfig(**kwargs)
