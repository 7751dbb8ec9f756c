"""Eval file loader — imports Python eval files and collects their registries."""

import hashlib
import importlib.util
import sys
from pathlib import Path

from s_eval.definition.domain.errors import EvalDefinitionError
from s_eval.definition.domain.registry import EvalRegistry
from s_eval.definition.domain.source import EvalFile
from s_eval.definition.infrastructure.errors import (
    EvalLoadError,
    EvalRegistryMissingError,
)


def discover_eval_files(path: Path) -> list[Path]:
    """Return *path* itself, or every ``*.py`` below it in sorted order.

    Files and directories whose name starts with ``_`` or ``.`` are skipped.
    """
    if path.is_file():
        return [path]
    if not path.is_dir():
        raise EvalLoadError(path=path, reason="no such file or directory")
    return sorted(
        p
        for p in path.rglob("*.py")
        if not any(part.startswith(("_", ".")) for part in p.relative_to(path).parts)
    )


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    return f"s_eval_evalfile_{path.stem}_{digest}"


def load_eval_file(path: Path) -> EvalFile:
    """Import one eval file and merge every module-level EvalRegistry it defines.

    Definitions without an explicit dataset take the file stem as dataset.

    Raises:
        EvalLoadError: if the file cannot be imported or declares no registry.
    """
    module_name = _module_name(path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise EvalLoadError(path=path, reason="not an importable Python file")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except EvalDefinitionError:
        sys.modules.pop(module_name, None)
        raise
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise EvalLoadError(path=path, reason=f"{type(exc).__name__}: {exc}") from exc

    combined = EvalRegistry()
    registries = {
        id(value): value
        for value in vars(module).values()
        if isinstance(value, EvalRegistry)
    }
    if not registries:
        raise EvalRegistryMissingError(path=path)
    for value in registries.values():
        for definition in value.with_default_dataset(path.stem).definitions():
            combined.add(definition)
    return EvalFile(path=path, registry=combined)


def load_eval_files(path: Path) -> list[EvalFile]:
    """Load every eval file under *path* (or *path* itself if it is a file).

    Directories skip ``.py`` files that declare no registry, since helper
    modules commonly live beside eval files.
    """
    files = discover_eval_files(path)
    if path.is_file():
        return [load_eval_file(files[0])]

    loaded: list[EvalFile] = []
    for file in files:
        try:
            loaded.append(load_eval_file(file))
        except EvalRegistryMissingError:
            continue
    return loaded


class PythonEvalSource:
    """Satisfies the EvalSource protocol by importing Python eval files."""

    def load(self, path: Path) -> list[EvalFile]:
        return load_eval_files(path)
