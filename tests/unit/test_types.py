"""Unit tests for shared value types."""

import pytest

from whisperbind.types import ExecutionTarget, GenerationResult, LanguageResult


class TestExecutionTarget:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (ExecutionTarget.CUDA, ExecutionTarget.CUDA),
            ("default", ExecutionTarget.DEFAULT),
            ("Auto", ExecutionTarget.DEFAULT),
            (" cpu ", ExecutionTarget.CPU),
            ("CUDA", ExecutionTarget.CUDA),
            (0, ExecutionTarget.DEFAULT),
        ],
    )
    def test_parse(self, value, expected):
        assert ExecutionTarget.parse(value) is expected

    @pytest.mark.parametrize("value", ["tpu", "", 1, -1, True, None, 0.0])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            ExecutionTarget.parse(value)

    def test_device(self):
        assert ExecutionTarget.DEFAULT.device is None
        assert ExecutionTarget.CPU.device == "cpu"
        assert ExecutionTarget.CUDA.device == "cuda"


def test_language_result_is_a_pair():
    label, score = LanguageResult("<|en|>", 0.9)
    assert (label, score) == ("<|en|>", 0.9)


def test_generation_result_defaults():
    assert GenerationResult(sequences_ids=[[1, 2]]).scores == []
