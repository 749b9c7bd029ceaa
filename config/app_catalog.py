"""
AppCatalog — loads config/managed_apps.yaml and exposes the apps the
AirWatch connector knows how to install.
"""

import pathlib
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

PLATFORMS = ("android", "ios")


@dataclass(frozen=True)
class ManagedApp:
    app_id: str
    name: str
    keywords: List[str] = field(default_factory=list)
    bundle_ids: Dict[str, str] = field(default_factory=dict)

    def bundle_id(self, platform: str) -> Optional[str]:
        return self.bundle_ids.get(platform.lower())


class AppCatalog:
    def __init__(self, catalog_path: str | None = None):
        if not catalog_path:
            catalog_path = str(
                pathlib.Path(__file__).parent / "managed_apps.yaml"
            )
        with open(catalog_path, "r", encoding="utf-8") as fh:
            raw: Dict[str, Any] = yaml.safe_load(fh) or {}

        self._apps: Dict[str, ManagedApp] = {}
        for app_id, info in (raw.get("apps") or {}).items():
            self._apps[app_id] = ManagedApp(
                app_id=app_id,
                name=info.get("name", app_id),
                keywords=[str(k).lower() for k in info.get("keywords", [app_id])],
                bundle_ids={p: info[p] for p in PLATFORMS if info.get(p)},
            )

    def find_by_keyword(self, keyword: str) -> Optional[ManagedApp]:
        """Return the app whose keywords include *keyword* (case-insensitive)."""
        wanted = keyword.strip().lower()
        for app in self._apps.values():
            if wanted in app.keywords:
                return app
        return None

    def keyword_regex(self) -> str:
        """Case-insensitive whole-word regex matching any known keyword."""
        words = sorted(
            {kw for app in self._apps.values() for kw in app.keywords},
            key=len,
            reverse=True,
        )
        if not words:
            return r"(?!)()"
        return r"(?i)\b(" + "|".join(re.escape(w) for w in words) + r")\b"
