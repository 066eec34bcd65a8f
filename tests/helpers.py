"""Helpers tests."""

import json
import textwrap
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional


def make_app(
    base_dir: Path,
    source_dir: str = "src",
    main_file: str = "main.py",
    body: str = "",
) -> SimpleNamespace:
    """Create a small application whose entry records how it was started.

    The entry writes `__name__` and `sys.argv` as JSON to a marker file, then
    runs `body`.
    """
    marker = base_dir / f"{source_dir.replace('/', '_')}_{Path(main_file).stem}.json"
    entry = base_dir / source_dir / main_file
    entry.parent.mkdir(parents=True, exist_ok=True)
    script = textwrap.dedent(
        f"""
        import json
        import sys

        with open({str(marker)!r}, "w", encoding="utf-8") as fh:
            json.dump({{"name": __name__, "argv": sys.argv[1:]}}, fh)
        """
    )
    entry.write_text(script + textwrap.dedent(body), encoding="utf-8")
    return SimpleNamespace(entry=entry, marker=marker, source=base_dir / source_dir)


def read_marker(app: SimpleNamespace) -> Optional[dict[str, Any]]:
    """Return what the app recorded, or None when it never ran."""
    if not app.marker.exists():
        return None
    return json.loads(app.marker.read_text(encoding="utf-8"))
