"""Serialization / deserialization (serde) mixin for Pydantic models.

Example Usage:
cfg = RunConfig(source_dir="src", main_file="main")

ys = cfg.to_yaml()
cfg1 = RunConfig.from_yaml(ys)

cfg.save_yaml("run_configuration")
cfg2 = RunConfig.load_yaml("run_configuration")

"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, TypeVar, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound="BaseModel")


class SerdeMixin(BaseModel):
    """Mixin adding YAML serialization / deserialization to Pydantic models."""

    # ---------- exports ----------
    def to_dict(self, **dump_kwargs: Any) -> dict[str, Any]:
        """Convert model to dict. Pass model_dump kwargs if desired."""
        return self.model_dump(**dump_kwargs)

    def to_yaml(self, **dump_kwargs: Any) -> str:
        """Convert model to block-style YAML, skipping unset optionals.

        Pass yaml.safe_dump kwargs if desired.
        """
        data = self.model_dump(exclude_none=True)
        return str(
            yaml.safe_dump(
                data,
                allow_unicode=True,
                sort_keys=False,
                default_flow_style=False,
                **dump_kwargs,
            )
        )

    # ---------- loaders ----------
    @classmethod
    def from_mapping(cls: type[T], data: Mapping[str, Any], **kw: Any) -> T:
        """Validate an already-parsed mapping with friendly errors."""
        try:
            return cls.model_validate(dict(data), **kw)
        except ValidationError as e:
            raise ValueError(SerdeMixin._format_validation_error(e)) from e

    @classmethod
    def from_yaml(cls: type[T], source: Union[str, Path], **validate_kwargs: Any) -> T:
        """Instantiate model from a YAML string or a file path with friendly errors."""
        if isinstance(source, Path):
            text = source.read_text(encoding="utf-8-sig")
        else:
            text = str(source)

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(SerdeMixin._format_yaml_syntax_error(e, text)) from e

        if not isinstance(data, Mapping):
            logger.debug(f"YAML parsed to {type(data).__name__}, not a mapping")
            raise ValueError(
                "Expected a YAML mapping of keys to values, "
                f"got {type(data).__name__}."
            )
        return cls.from_mapping(data, **validate_kwargs)  # type: ignore[return-value]

    # ---------- convenience save/load ----------
    def save_yaml(self, path: Union[str, Path], **dump_kwargs: Any) -> Path:
        """Save model to a YAML file. Returns the Path."""
        p = Path(path)
        p.write_text(self.to_yaml(**dump_kwargs), encoding="utf-8")
        return p

    @classmethod
    def load_yaml(cls: type[T], path: Union[str, Path], **validate_kwargs: Any) -> T:
        """Load model from a YAML file."""
        return cls.from_yaml(Path(path), **validate_kwargs)  # type: ignore

    # ---------- helpers: friendly error messages ----------
    @staticmethod
    def _yaml_context_snippet(text: str, line: int, col: int, context: int = 1) -> str:
        """Build a tiny snippet pointing to the YAML error location.

        Lines are 1-based.
        """
        lines = text.splitlines()
        i = max(line - 1 - context, 0)
        j = min(line + context, len(lines))
        out = []
        for idx in range(i, j):
            prefix = ">" if idx == line - 1 else " "
            out.append(f"{prefix} {idx + 1:>4}: {lines[idx]}")
            if idx == line - 1:
                out.append(" " * (col + 8) + "^")
        return "\n".join(out)

    @classmethod
    def _format_yaml_syntax_error(cls, e: yaml.YAMLError, text: str) -> str:
        line = col = None
        problem_mark = getattr(e, "problem_mark", None)
        if problem_mark:
            line = problem_mark.line + 1
            col = problem_mark.column
        header = "Run configuration is not valid YAML."
        if line is not None and col is not None:
            snippet = cls._yaml_context_snippet(text, line, col)
            return f"{header}\nLine {line}, column {col + 1}.\n\n{snippet}"
        return f"{header} {e}"

    @classmethod
    def _format_validation_error(cls, e: ValidationError) -> str:
        """Turn Pydantic errors into plain-English lines."""
        lines = ["Run configuration does not match the expected structure:"]
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
            entry = cls._humanize_error(loc, err.get("type", ""), err.get("msg", ""))
            lines.append(f"• {entry}")
        return "\n".join(lines)

    @staticmethod
    def _humanize_error(loc: str, typ: str, msg: str) -> str:
        if typ == "missing":
            return f"Missing required field: `{loc}`."
        if typ == "extra_forbidden":
            return f"Unknown field `{loc}`. Remove this key or rename it."
        if typ.endswith(("_type", "_parsing")) or typ == "value_error":
            return f"Wrong value at `{loc}`. {msg}"
        nice = msg[0].upper() + msg[1:] if msg else "Invalid value."
        return f"{nice} (at `{loc}`)."
