"""Host registration: commands, variables and their attached types."""

from __future__ import annotations

from dataclasses import dataclass

from conch.analysis import LanguageVm, Type, is_type
from conch.lexer import is_identifier
from conch.treewalker import ExecutionOptions, create_state, is_callable


def create_vm(options: ExecutionOptions | None = None) -> LanguageVm:
    return LanguageVm(state=create_state(options))


def set_command(vm: LanguageVm, name: str, command: object) -> None:
    """Register a host command under `name`."""
    _check_name(name)
    if not is_callable(command):
        raise TypeError(f"Command `{name}` must be callable, got {type(command).__name__}")
    vm.state.globals[name] = command


def set_variable(vm: LanguageVm, name: str, value: object) -> None:
    _check_name(name)
    vm.state.globals[name] = value


@dataclass(slots=True)
class TypeAnalysisInfo:
    """Handle for one attached type; `remove()` detaches it again."""

    vm: LanguageVm
    name: str
    type: Type
    is_var: bool = False

    def remove(self) -> None:
        metadata = self.vm.vars_metadata if self.is_var else self.vm.global_metadata
        # Only detach if nothing replaced this attachment in the meantime.
        if metadata.get(self.name) is self.type:
            del metadata[self.name]


def attach_info(vm: LanguageVm, name: str, type: Type, *, is_var: bool = False) -> TypeAnalysisInfo:
    """Attach an analysis type to a global (or, with `is_var`, a script variable)."""
    _check_name(name)
    if not is_type(type):
        raise TypeError(f"Expected an analysis type for `{name}`, got {type!r}")
    metadata = vm.vars_metadata if is_var else vm.global_metadata
    metadata[name] = type
    return TypeAnalysisInfo(vm=vm, name=name, type=type, is_var=is_var)


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not is_identifier(name):
        raise ValueError(f"Invalid name {name!r}: expected an identifier")
