"""Unit tests for engines.script.runner: evaluation plus result coercion."""

import sys
from enum import Enum
from pathlib import Path

import pytest

from app.core.environment import EnvironmentUnavailableError, HostEnvironment
from app.engines.script import SecureScript, UnapprovedScriptError
from app.engines.script.loader import default_importer, make_importer
from app.engines.script.runner import (
    ChoiceScriptTypeError,
    ResultShape,
    classify_result,
    run_script,
    to_choice_string,
)


def _run(text: str, env: HostEnvironment | None = None, **kw: object) -> list[str] | None:
    environment = env or HostEnvironment()
    return run_script(
        SecureScript(script=text, **kw), environment_provider=lambda: environment
    )


class Color(Enum):
    RED = "red"


class TestClassifyResult:
    @pytest.mark.parametrize(
        "value, shape",
        [
            (None, ResultShape.ABSENT),
            ([], ResultShape.SEQUENCE),
            (("a",), ResultShape.SEQUENCE),
            ("abc", ResultShape.OTHER),
            (b"abc", ResultShape.OTHER),
            (1, ResultShape.OTHER),
            ({"a": 1}, ResultShape.OTHER),
        ],
    )
    def test_shapes(self, value: object, shape: ResultShape) -> None:
        assert classify_result(value) is shape


class TestToChoiceString:
    def test_conversions(self) -> None:
        assert to_choice_string("x") == "x"
        assert to_choice_string(b"caf\xc3\xa9") == "café"
        assert to_choice_string(3) == "3"
        assert to_choice_string(True) == "true"
        assert to_choice_string(Color.RED) == "red"
        assert to_choice_string(1.5) == "1.5"


class TestRunScript:
    def test_strings_in_order(self) -> None:
        assert _run('return ["b", "a", "b"]') == ["b", "a", "b"]

    def test_none_elements_dropped(self) -> None:
        assert _run('return ["a", None, "b"]') == ["a", "b"]

    def test_elements_converted(self) -> None:
        assert _run("return [1, 2.5, False]") == ["1", "2.5", "false"]

    def test_tuple_accepted(self) -> None:
        assert _run('return ("x", "y")') == ["x", "y"]

    def test_multiline_string_elements_unchanged(self) -> None:
        assert _run('return """x\ny""".splitlines()') == ["x", "y"]

    def test_list_built_with_augmented_assignment(self) -> None:
        script = 'tags = []\nfor t in ["a", "b"]:\n    tags += [t]\nreturn tags'
        assert _run(script) == ["a", "b"]

    def test_empty_list(self) -> None:
        assert _run("return []") == []

    def test_no_result(self) -> None:
        assert _run("x = 1") is None

    def test_non_sequence_rejected(self) -> None:
        with pytest.raises(ChoiceScriptTypeError, match="list of strings"):
            _run("return 1")

    def test_string_rejected(self) -> None:
        with pytest.raises(ChoiceScriptTypeError):
            _run('return "abc"')

    def test_script_error_propagates(self) -> None:
        with pytest.raises(ZeroDivisionError):
            _run("return [1 / 0]")

    def test_environment_unavailable(self) -> None:
        with pytest.raises(EnvironmentUnavailableError):
            run_script(SecureScript(script="return []"), environment_provider=lambda: None)

    def test_unrestricted_requires_approval(self) -> None:
        with pytest.raises(UnapprovedScriptError):
            _run("return ['a']", sandbox=False)

    def test_unrestricted_approved(self) -> None:
        env = HostEnvironment()
        text = "import os\nreturn [os.sep]"
        env.approval.preapprove(text)
        assert _run(text, env, sandbox=False) == [__import__("os").sep]

    def test_plugin_importer_used(self, tmp_path: Path) -> None:
        (tmp_path / "runner_plugin_mod.py").write_text("CHOICES = ['p1', 'p2']\n")
        env = HostEnvironment(importer=make_importer(default_importer(), [str(tmp_path)]))
        text = "import runner_plugin_mod\nreturn runner_plugin_mod.CHOICES"
        env.approval.preapprove(text)
        assert _run(text, env, sandbox=False) == ["p1", "p2"]
        assert "runner_plugin_mod" not in sys.modules

    def test_classpath_entries_searched(self, tmp_path: Path) -> None:
        (tmp_path / "runner_classpath_mod.py").write_text("CHOICES = ['c1']\n")
        env = HostEnvironment()
        text = "import runner_classpath_mod\nreturn runner_classpath_mod.CHOICES"
        env.approval.preapprove(text)
        out = _run(text, env, sandbox=False, classpath=(str(tmp_path),))
        assert out == ["c1"]
