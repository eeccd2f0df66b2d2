"""Path resolution utilities for CLI."""

from pathlib import Path


def resolve_module_dir(module_dir: str) -> Path:
    """
    Resolve a module directory argument.

    Relative paths are resolved against the current directory.

    Args:
        module_dir: User-provided directory path

    Returns:
        Resolved Path object

    Raises:
        FileNotFoundError: If the directory does not exist or is a file
    """
    path = Path(module_dir)
    if not path.is_absolute():
        path = Path.cwd() / path
    resolved_path = path.resolve()

    if not resolved_path.exists():
        raise FileNotFoundError(
            f"Module directory not found: {module_dir}. Please check the path and try again."
        )

    if not resolved_path.is_dir():
        raise FileNotFoundError(
            f"Path is not a directory: {module_dir}. "
            "Please provide the directory that holds the module's .tf files."
        )

    return resolved_path
