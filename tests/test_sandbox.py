"""
Tests for the embedded runtime and the host/embedded boundary.

Copyright (c) 2025 Graziano Labs Corp.
"""

from datetime import timezone

import pytest
from algobridge.errors import BridgingError, ScriptError, ScriptLoadError
from algobridge.runtime.boundary import host_call, is_script_frame
from algobridge.runtime.host_api import HostAlgorithm, Order
from algobridge.runtime.sandbox import EmbeddedAlgorithm, ScriptRuntime


@host_call
def run_callback(callback):
    """Host function that calls back into embedded code."""
    return callback()


@host_call
def host_failure():
    raise RuntimeError("host exploded")


SOURCE = '''\
class TradingAlgorithm(HostAlgorithm):
    def initialize(self):
        self.spy = self.add_security("spy", 420.0)

    def buy(self):
        return self.market_order(self.spy, 10)

    def null_order(self):
        self.market_order(None, 1)

    def nested(self):
        return run_callback(self.null_order)

    def direct(self):
        host_failure()

    def log(self):
        self.debug("hello")
        return len(self.debug_messages)
'''


@pytest.fixture
def runtime():
    return ScriptRuntime(namespace={
        "run_callback": run_callback,
        "host_failure": host_failure,
    })


@pytest.fixture
def algorithm(runtime):
    algo = runtime.load(SOURCE, "Trading").create("TradingAlgorithm")
    algo.call("initialize")
    return algo


def test_load_registers_module(runtime):
    module = runtime.load(SOURCE, "Trading")
    assert runtime.modules["Trading"] is module
    assert module.filename == "Trading.py"
    assert module.module.__name__ == "Trading"


def test_loaded_module_not_in_sys_modules(runtime):
    import sys
    runtime.load(SOURCE, "Isolated_Module")
    assert "Isolated_Module" not in sys.modules


def test_create_returns_embedded_algorithm(algorithm):
    assert isinstance(algorithm, EmbeddedAlgorithm)
    assert isinstance(algorithm.instance, HostAlgorithm)
    assert algorithm.has_method("buy")
    assert not algorithm.has_method("sell")


def test_successful_host_call(algorithm):
    order = algorithm.call("buy")
    assert isinstance(order, Order)
    assert order.symbol == "SPY"
    assert order.quantity == 10
    assert algorithm.instance.orders == [order]
    assert order.submitted_at.tzinfo is timezone.utc


def test_debug_messages(algorithm):
    assert algorithm.call("log") == 1
    assert algorithm.instance.debug_messages == ["hello"]


def test_host_failure_becomes_bridging_error(algorithm):
    with pytest.raises(BridgingError) as info:
        algorithm.call("null_order")
    error = info.value
    assert error.source_module == "Trading"
    assert error.source_function == "null_order"
    assert error.source_line == 9
    assert error.source_snippet == "self.market_order(None, 1)"
    assert isinstance(error.__cause__, ValueError)


def test_plain_host_function_call(algorithm):
    with pytest.raises(BridgingError) as info:
        algorithm.call("direct")
    assert info.value.source_function == "direct"
    assert isinstance(info.value.inner_error, RuntimeError)


def test_bridging_error_not_wrapped_twice(algorithm):
    """Host -> script -> host failure surfaces the innermost call site once."""
    with pytest.raises(BridgingError) as info:
        algorithm.call("nested")
    error = info.value
    assert error.source_function == "null_order"
    assert isinstance(error.inner_error, ValueError)
    assert not isinstance(error.inner_error, BridgingError)


def test_host_method_called_through_proxy_not_wrapped(algorithm):
    """A host method reached without running embedded code keeps its own error."""
    with pytest.raises(ValueError, match="Value cannot be null") as info:
        algorithm.call("market_order", None, 1)
    assert type(info.value) is ValueError


def test_host_calls_from_host_code_not_wrapped():
    host = HostAlgorithm()
    with pytest.raises(ValueError, match="Value cannot be null"):
        host.market_order(None, 1)


def test_unknown_symbol_from_host_code_is_key_error():
    host = HostAlgorithm()
    with pytest.raises(KeyError):
        host.market_order("AAPL", 1)


def test_zero_quantity_rejected():
    host = HostAlgorithm()
    symbol = host.add_security("spy")
    with pytest.raises(ValueError, match="non-zero"):
        host.market_order(symbol, 0)


def test_script_failure_becomes_script_error(runtime):
    source = "class Broken(HostAlgorithm):\n    def run(self):\n        return {}['missing']\n"
    algo = runtime.load(source, "Broken_Module").create("Broken")
    with pytest.raises(ScriptError) as info:
        algo.call("run")
    error = info.value
    assert error.module_name == "Broken_Module"
    assert isinstance(error.inner_error, KeyError)
    assert [(f.name, f.lineno, f.line) for f in error.frames] == [
        ("run", 3, "return {}['missing']")
    ]
    assert error.__cause__ is error.inner_error


def test_module_level_failure(runtime):
    with pytest.raises(ScriptError) as info:
        runtime.load("x = 1\ny = x / 0\n", "Module_Level")
    assert info.value.frames[0].name == "<module>"
    assert info.value.frames[0].lineno == 2
    assert "Module_Level" not in runtime.modules


def test_syntax_error_raises_load_error(runtime):
    with pytest.raises(ScriptLoadError) as info:
        runtime.load("def broken(:\n    pass\n", "Syntax_Module")
    error = info.value
    assert error.code == "E101"
    assert error.loc is not None and error.loc[0] == 1
    assert "Syntax_Module.py" in error.message
    assert isinstance(error.__cause__, SyntaxError)


def test_constructor_failure_is_script_error(runtime):
    source = (
        "class Fails(HostAlgorithm):\n"
        "    def __init__(self):\n"
        "        super().__init__()\n"
        "        raise RuntimeError('bad init')\n"
    )
    module = runtime.load(source, "Init_Module")
    with pytest.raises(ScriptError) as info:
        module.create("Fails")
    assert info.value.frames[-1].name == "__init__"


def test_missing_class(runtime):
    module = runtime.load(SOURCE, "Trading")
    with pytest.raises(AttributeError, match="no attribute 'Missing'"):
        module.create("Missing")


def test_load_file(tmp_path, runtime):
    path = tmp_path / "file_algorithm.py"
    path.write_text(SOURCE)
    module = runtime.load_file(str(path))
    assert module.name == "file_algorithm"


def test_load_file_missing(runtime):
    with pytest.raises(FileNotFoundError):
        runtime.load_file("does/not/exist.py")


def test_is_script_frame():
    import sys
    assert is_script_frame(sys._getframe()) is False
    assert is_script_frame(None) is False
