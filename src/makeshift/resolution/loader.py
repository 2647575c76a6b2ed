# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of compiled types from the output root.

Types are loaded from their ``.pyc`` files, never from source, so that what
runs is exactly what the staleness check judged current.  Loaded modules are
registered under a private namespace to keep them apart from the regularly
imported modules of the same name, and cached for the lifetime of the loader.

Building code may also import compiled modules by their proper names, e.g.
``from acme.lib.builder import build_helpers`` once ``acme.lib`` has been
built.  A finder at the end of :data:`sys.meta_path` serves such imports from
the output root; directories there become namespace packages.
"""

from __future__ import annotations

import importlib.abc
import importlib.util
import sys
from collections.abc import Sequence
from importlib.machinery import ModuleSpec, SourcelessFileLoader
from pathlib import Path
from types import ModuleType

from makeshift.compiler.staleness import OUTPUT_SUFFIX, SourceArtifact
from makeshift.errors import FatalError, UserError

# ###############
# Public Interface
# ###############

LOADED_NAMESPACE = "_makeshift_out"


class CompiledCodeFinder(importlib.abc.MetaPathFinder):
    """Finds compiled modules under an output root by their proper names."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root

    def find_spec(
        self,
        fullname: str,
        path: Sequence[str] | None,
        target: ModuleType | None = None,
    ) -> ModuleSpec | None:
        parts = fullname.split(".")
        if parts[0] == LOADED_NAMESPACE:
            return None
        location = self.output_root.joinpath(*parts)
        compiled = location.with_name(location.name + OUTPUT_SUFFIX)
        if compiled.is_file():
            return importlib.util.spec_from_file_location(
                fullname, compiled, loader=SourcelessFileLoader(fullname, str(compiled))
            )
        if location.is_dir():
            spec = ModuleSpec(fullname, None, is_package=True)
            spec.submodule_search_locations = [str(location)]
            return spec
        return None


def install_finder(output_root: Path) -> CompiledCodeFinder:
    """Make the compiled modules under *output_root* importable by their proper names.

    The finder goes last, after the interpreter's own, and replaces the finder
    of any earlier output root.
    """
    sys.meta_path[:] = [finder for finder in sys.meta_path if not isinstance(finder, CompiledCodeFinder)]
    finder = CompiledCodeFinder(output_root)
    sys.meta_path.append(finder)
    return finder


class ModuleLoader:
    """Loads compiled modules from one output root, each at most once.

    Creating a loader also installs the finder for its output root.
    """

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root
        self.finder = install_finder(output_root)
        self._modules: dict[Path, ModuleType] = {}

    def load_module(self, artifact: SourceArtifact) -> ModuleType:
        """Return the module compiled from *artifact*, executing it on first use.

        Raises:
            FatalError: If no compiled file exists or executing the module fails.
        """
        compiled = artifact.output_file(self.output_root)
        if compiled in self._modules:
            return self._modules[compiled]
        if not compiled.is_file():
            raise FatalError(
                "Compiled module not found",
                context={"source": str(artifact.source_file), "compiled": str(compiled)},
            )

        name = f"{LOADED_NAMESPACE}.{artifact.type_name}"
        loader = SourcelessFileLoader(name, str(compiled))
        spec = importlib.util.spec_from_loader(name, loader)
        if spec is None:
            raise FatalError("Cannot create a module spec", context={"compiled": str(compiled)})
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            loader.exec_module(module)
        except (UserError, FatalError):
            sys.modules.pop(name, None)
            raise
        except Exception as exc:
            sys.modules.pop(name, None)
            raise FatalError(
                f"Cannot load module `{artifact.type_name}`: {exc!r}",
                context={"source": str(artifact.source_file), "compiled": str(compiled)},
            ) from exc
        self._modules[compiled] = module
        return module

    def load_type(self, artifact: SourceArtifact) -> type:
        """Return the class proper to *artifact*, e.g. ``BuildTarget`` from ``build_target.py``.

        Raises:
            FatalError: If the module cannot be loaded or does not define the class.
        """
        module = self.load_module(artifact)
        found = getattr(module, artifact.class_name, None)
        if not isinstance(found, type):
            raise FatalError(
                f"Module `{artifact.type_name}` defines no class `{artifact.class_name}`",
                context={"source": str(artifact.source_file)},
            )
        return found
