import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import PageObjectMethod

logger = logging.getLogger(__name__)

_CLASS = re.compile(r"(?:public\s+)?(?:abstract\s+)?class\s+(\w+)")
_METHOD = re.compile(
    r"(?:/\*\*(?P<doc>(?:(?!\*/).)*?)\*/\s*(?:@\w+(?:\([^)]*\))?\s*)*)?"
    r"public\s+(?:static\s+)?(?:final\s+)?"
    r"(?P<ret>\w+(?:<[^>]+>)?(?:\[\])?)\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)",
    re.DOTALL,
)
_SKIP_METHOD = re.compile(r"^(?:get|set|is|has)[A-Z]|^(?:toString|equals|hashCode)$")
_SKIP_DIRS = {"node_modules", "target", "build", "out", ".git"}

_PLATFORM_MARKERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ctv", ("ctvscreen", "/ctv/")),
    ("mobile", ("mobilescreen", "/mobile/")),
    ("web", ("webscreen", "webpage", "/web/")),
    ("html5", ("html5screen", "/html5/")),
    ("hdmi", ("hdmiscreen", "/hdmi/")),
)
_BRANDS = ("pplus", "plutotv")


class PageObjectLoader:
    """
    Mines public page-object methods from a Java test repository.

    Only files whose name contains "Screen" or "Page" are read.
    Getters, setters and Object overrides are skipped.
    """

    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self.errors: List[Dict[str, str]] = []
        self.files_scanned = 0

    def load_methods(self) -> List[PageObjectMethod]:
        methods: List[PageObjectMethod] = []
        root = Path(self.repo_path)

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not d.startswith(".") and d not in _SKIP_DIRS]
            for filename in sorted(filenames):
                if not filename.endswith(".java"):
                    continue
                if "Screen" not in filename and "Page" not in filename:
                    continue
                path = Path(dirpath) / filename
                methods.extend(self._parse_file(path, path.relative_to(root).as_posix()))

        logger.info(f"Mined {len(methods)} methods from {self.files_scanned} files in {self.repo_path}")
        return methods

    def _parse_file(self, path: Path, relative_path: str) -> List[PageObjectMethod]:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self.errors.append({"path": str(path), "error": str(e)})
            return []
        self.files_scanned += 1
        return parse_java_source(content, file=str(path), relative_path=relative_path)


def parse_java_source(
    content: str,
    file: Optional[str] = None,
    relative_path: Optional[str] = None,
) -> List[PageObjectMethod]:
    class_match = _CLASS.search(content)
    if not class_match:
        return []

    class_name = class_match.group(1)
    platform, brand = detect_platform_and_brand(relative_path or file or "")

    methods = []
    for match in _METHOD.finditer(content):
        name = match.group("name")
        if _SKIP_METHOD.search(name):
            continue
        methods.append(PageObjectMethod(
            class_name=class_name,
            method_name=name,
            return_type=match.group("ret"),
            parameters=_parse_params(match.group("params")),
            file=file,
            relative_path=relative_path,
            platform=platform,
            brand=brand,
            javadoc=_clean_javadoc(match.group("doc")),
        ))
    return methods


def detect_platform_and_brand(relative_path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    "ui/ctvscreens/pplus/PlayerScreen.java" -> ("ctv", "pplus")
    "screens/PlayerScreen.java" -> (None, None)
    """
    path_lower = "/" + relative_path.replace("\\", "/").lower()

    platform = None
    for name, markers in _PLATFORM_MARKERS:
        if any(marker in path_lower for marker in markers):
            platform = name
            break

    brand = next((b for b in _BRANDS if b in path_lower), None)
    return platform, brand


def _parse_params(raw: str) -> List[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _clean_javadoc(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    lines = []
    for line in raw.splitlines():
        line = line.strip().lstrip("*").strip()
        if line.startswith("@"):
            break
        if line:
            lines.append(line)
    return " ".join(lines) or None
