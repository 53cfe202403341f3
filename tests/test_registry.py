"""
Tests for interpreter registration and chain building.

Copyright (c) 2025 Graziano Labs Corp.
"""

import pytest
from algobridge.config import AlgoBridgeConfig
from algobridge.errors import BridgingError, RegistryError
from algobridge.interpreters import (
    BridgingErrorInterpreter,
    InterpreterChain,
    NullInterpreter,
    ScriptErrorInterpreter,
    ScriptKeyErrorInterpreter,
)
from algobridge.runtime.registry import (
    InterpreterRegistry,
    build_chain,
    discover_interpreters,
    load_interpreter,
    load_registry_file,
)


def chain_types(chain):
    return [type(i) for i in chain.interpreters]


# Discovery

def test_discover_builtin_modules_sorted_by_order():
    found = discover_interpreters([
        "algobridge.interpreters.script",
        "algobridge.interpreters.bridging",
    ])
    assert [type(i) for i in found] == [
        BridgingErrorInterpreter,
        ScriptKeyErrorInterpreter,
        ScriptErrorInterpreter,
    ]


def test_discover_skips_abstract_null_and_chain():
    found = discover_interpreters([
        "algobridge.interpreters.base",
        "algobridge.interpreters.chain",
    ])
    assert found == []


def test_discover_skips_imported_classes():
    """Classes re-exported by a module are not discovered twice."""
    found = discover_interpreters(["algobridge.runtime.registry"])
    assert found == []


def test_discover_accepts_module_objects():
    import algobridge.interpreters.bridging as bridging
    found = discover_interpreters([bridging])
    assert [type(i) for i in found] == [BridgingErrorInterpreter]


def test_discovered_chain_with_no_interpreters_passes_through():
    chain = InterpreterChain(discover_interpreters([]))
    error = RuntimeError("boom")
    assert chain.interpret(error) is error


# Loading by path

def test_load_interpreter_dotted_path():
    interpreter = load_interpreter(
        "algobridge.interpreters.bridging.BridgingErrorInterpreter",
        include_host_stack=True
    )
    assert isinstance(interpreter, BridgingErrorInterpreter)
    assert interpreter.include_host_stack is True


def test_load_interpreter_colon_path():
    interpreter = load_interpreter("algobridge.interpreters.script:ScriptErrorInterpreter")
    assert isinstance(interpreter, ScriptErrorInterpreter)


@pytest.mark.parametrize("path", [
    "algobridge.interpreters.nothing.Missing",
    "algobridge.interpreters.bridging.Missing",
    "NoModule",
])
def test_load_interpreter_import_failures(path):
    with pytest.raises(RegistryError) as info:
        load_interpreter(path)
    assert info.value.code == "E300"


def test_load_interpreter_rejects_non_interpreters():
    with pytest.raises(RegistryError, match="not an ErrorInterpreter"):
        load_interpreter("algobridge.errors.BridgingError")


def test_load_interpreter_bad_options():
    with pytest.raises(RegistryError, match="Cannot instantiate"):
        load_interpreter(
            "algobridge.interpreters.bridging.BridgingErrorInterpreter",
            colour="red"
        )


# Registry file

def test_load_registry_file(tmp_path):
    path = tmp_path / "interpreters.yaml"
    path.write_text(
        "interpreters:\n"
        "  - class: algobridge.interpreters.bridging.BridgingErrorInterpreter\n"
        "    options:\n"
        "      include_host_stack: true\n"
        "  - class: algobridge.interpreters.script.ScriptKeyErrorInterpreter\n"
        "    enabled: false\n"
        "  - class: algobridge.interpreters.script:ScriptErrorInterpreter\n"
        "    options:\n"
        "      max_frames: 2\n"
    )
    found = load_registry_file(str(path))
    assert [type(i) for i in found] == [BridgingErrorInterpreter, ScriptErrorInterpreter]
    assert found[0].include_host_stack is True
    assert found[1].max_frames == 2


@pytest.mark.parametrize("document", [
    "interpreters: not-a-list\n",
    "interpreters:\n  - options: {}\n",
    "interpreters:\n  - class: a.b.C\n    priority: 1\n",
    "handlers: []\n",
    "- just\n- a list\n",
])
def test_invalid_registry_file(tmp_path, document):
    path = tmp_path / "interpreters.yaml"
    path.write_text(document)
    with pytest.raises(RegistryError) as info:
        load_registry_file(str(path))
    assert info.value.code == "E301"


def test_registry_file_bad_yaml(tmp_path):
    path = tmp_path / "interpreters.yaml"
    path.write_text("interpreters: [unclosed\n")
    with pytest.raises(RegistryError) as info:
        load_registry_file(str(path))
    assert info.value.code == "E301"


def test_registry_file_missing():
    with pytest.raises(FileNotFoundError):
        load_registry_file("nonexistent.yaml")


# InterpreterRegistry

def test_register_and_build_orders_by_priority():
    reg = InterpreterRegistry()
    reg.register(ScriptErrorInterpreter())
    reg.register(BridgingErrorInterpreter())
    reg.register(ScriptKeyErrorInterpreter())

    chain = reg.build()

    assert chain_types(chain) == [
        BridgingErrorInterpreter,
        ScriptKeyErrorInterpreter,
        ScriptErrorInterpreter,
        NullInterpreter,
    ]


def test_duplicate_registration_fails():
    """Two interpreters for the same kind is a configuration defect."""
    reg = InterpreterRegistry()
    reg.register(BridgingErrorInterpreter())
    with pytest.raises(ValueError, match="already registered"):
        reg.register(BridgingErrorInterpreter(include_host_stack=True))


def test_register_rejects_non_interpreter():
    with pytest.raises(TypeError):
        InterpreterRegistry().register(object())


def test_register_ignores_null_interpreter():
    reg = InterpreterRegistry()
    reg.register(NullInterpreter())
    assert reg.interpreters == {}
    assert chain_types(reg.build()) == [NullInterpreter]


def test_register_path_and_modules():
    reg = InterpreterRegistry()
    reg.register_path("algobridge.interpreters.bridging.BridgingErrorInterpreter")
    reg.register_modules(["algobridge.interpreters.script"])
    assert [entry["name"] for entry in reg.list_interpreters()] == [
        "BridgingErrorInterpreter",
        "ScriptKeyErrorInterpreter",
        "ScriptErrorInterpreter",
    ]


def test_list_interpreters_metadata():
    reg = InterpreterRegistry()
    reg.register(BridgingErrorInterpreter())
    meta = reg.list_interpreters()[0]
    assert meta == {
        "name": "BridgingErrorInterpreter",
        "module": "algobridge.interpreters.bridging",
        "order": 0,
    }


# build_chain

def test_build_chain_builtin():
    chain = build_chain(AlgoBridgeConfig(include_host_stack=True, max_script_frames=4))
    assert chain_types(chain) == [
        BridgingErrorInterpreter,
        ScriptKeyErrorInterpreter,
        ScriptErrorInterpreter,
        NullInterpreter,
    ]
    assert chain.interpreters[0].include_host_stack is True
    assert chain.interpreters[2].max_frames == 4


def test_build_chain_from_paths():
    chain = build_chain(AlgoBridgeConfig(interpreters=[
        "algobridge.interpreters.script.ScriptErrorInterpreter",
        "algobridge.interpreters.bridging.BridgingErrorInterpreter",
    ]))
    assert chain_types(chain) == [
        BridgingErrorInterpreter,
        ScriptErrorInterpreter,
        NullInterpreter,
    ]


def test_build_chain_file_takes_precedence(tmp_path):
    path = tmp_path / "interpreters.yaml"
    path.write_text("interpreters: []\n")
    chain = build_chain(AlgoBridgeConfig(
        interpreter_file=str(path),
        interpreters=["algobridge.interpreters.bridging.BridgingErrorInterpreter"],
    ))
    assert chain_types(chain) == [NullInterpreter]
    error = BridgingError(ValueError("x"), "Test_Module", "f", 1)
    assert chain.interpret(error) is error
