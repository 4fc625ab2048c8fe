"""Render `.worktree/files` into a freshly created worktree."""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
import unicodedata
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from .exceptions import TemplateRenderError
from .models import TemplateData

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".tmpl"

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ASCII slug: `Feature/User Auth` -> `feature-user-auth`."""

    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _SLUG_STRIP.sub("-", ascii_value.lower()).strip("-")


def _build_environment() -> Environment:
    env = Environment(
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["slug"] = slugify
    return env


_ENVIRONMENT = _build_environment()


def render_text(source: str, data: TemplateData, *, name: str = "<template>") -> str:
    context = {**data.as_context(), "env": dict(os.environ)}
    try:
        return _ENVIRONMENT.from_string(source).render(context)
    except TemplateError as exc:
        raise TemplateRenderError(f"failed to render {name}: {exc}") from exc


def process_files(files_dir: Path, worktree_dir: Path, data: TemplateData) -> int:
    """Copy or render every file under `files_dir` into `worktree_dir`.

    Files ending in `.tmpl` are rendered and written without the suffix; all
    others are copied byte for byte. Permission bits are kept either way.
    Returns the number of files written.
    """

    if not files_dir.is_dir():
        return 0
    written = 0
    for source in sorted(files_dir.rglob("*")):
        relative = source.relative_to(files_dir)
        target = worktree_dir / relative
        if source.is_dir():
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TemplateRenderError(f"failed to create directory {relative}: {exc}") from exc
            continue
        if source.suffix == TEMPLATE_SUFFIX:
            _render_file(source, target.with_name(target.name[: -len(TEMPLATE_SUFFIX)]), data, relative)
        else:
            _copy_file(source, target, relative)
        written += 1
    logger.debug("Wrote %d file(s) from %s into %s", written, files_dir, worktree_dir)
    return written


def _render_file(source: Path, target: Path, data: TemplateData, relative: Path) -> None:
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateRenderError(f"failed to read template {relative}: {exc}") from exc
    rendered = render_text(text, data, name=str(relative))
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(rendered, encoding="utf-8")
        os.chmod(target, stat.S_IMODE(source.stat().st_mode))
    except OSError as exc:
        raise TemplateRenderError(f"failed to write {target.name} from {relative}: {exc}") from exc


def _copy_file(source: Path, target: Path, relative: Path) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        shutil.copymode(source, target)
    except OSError as exc:
        raise TemplateRenderError(f"failed to copy file {relative}: {exc}") from exc


__all__ = ["process_files", "render_text", "slugify", "TEMPLATE_SUFFIX"]
