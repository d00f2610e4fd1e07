from pathlib import Path


def resolve_destination(path: str | Path, absolute: bool, home: Path) -> Path:
    if absolute:
        return Path(path)
    return home / path


def resolve_source(path: str | Path, repo_root: Path) -> Path:
    return repo_root / path


def compact_home_path(path: str | Path, home: Path | None = None) -> str:
    text = str(path)
    home_text = str(home or Path.home())
    if text == home_text:
        return "~"
    home_prefix = f"{home_text}/"
    if text.startswith(home_prefix):
        return f"~/{text[len(home_prefix):]}"
    return text


def compact_home_paths_in_text(text: str, home: Path | None = None) -> str:
    home_text = str(home or Path.home())
    if text == home_text:
        return "~"
    return text.replace(f"{home_text}/", "~/")
