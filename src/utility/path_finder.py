"""Resolve project paths (config, templates, data, logs) relative to the repo root."""

from pathlib import Path


class PathResolver:
    """
    Folder resolver returning absolute paths relative to the project root,
    independent of the current working directory.
    """

    # utility -> src -> project root
    PROJECT_ROOT = Path(__file__).resolve().parents[2]

    DIR_MAP = {
        "root": PROJECT_ROOT,
        "config": PROJECT_ROOT / "src" / "config",
        "templates": PROJECT_ROOT / "src" / "config" / "templates.yml",
        "data": PROJECT_ROOT / "data",
        "logs": PROJECT_ROOT / "data" / "logs",
    }

    @classmethod
    def get(cls, name: str) -> Path:
        """
        Returns absolute path from name key.
        Directories (no suffix) are created on first access.
        """
        if name not in cls.DIR_MAP:
            raise KeyError(
                f"Unknown directory key: '{name}'. Valid keys: {list(cls.DIR_MAP.keys())}"
            )

        path = cls.DIR_MAP[name]
        if path.suffix == "":
            path.mkdir(parents=True, exist_ok=True)
        return path


class Finder:
    """Thin wrapper exposing resolved paths to services."""

    def get_directory(self, name: str) -> Path:
        """Return a resolved path by logical name."""
        return PathResolver.get(name)

    def get_file(self, name: str) -> Path:
        """Return a resolved file path by logical name without touching the filesystem."""
        if name not in PathResolver.DIR_MAP:
            raise KeyError(f"Unknown file key: '{name}'")
        return PathResolver.DIR_MAP[name]
