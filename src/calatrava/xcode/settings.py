"""Read-only tables of default Xcode build settings."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Iterable, Tuple, Union

from .model import BuildSettingValue

__all__ = [
    "COMMON_BUILD_SETTINGS",
    "DEFAULT_BUILD_SETTINGS",
    "EXCLUDED_SETTINGS",
    "BuildSettingsTable",
    "project_settings",
]


SettingsKey = Tuple[str, ...]
RawKey = Union[str, Tuple[str, ...]]

EXCLUDED_SETTINGS = ("DSTROOT", "INSTALL_PATH")

COMMON_BUILD_SETTINGS: dict[RawKey, dict[str, Any]] = {
    "all": {
        "ALWAYS_SEARCH_USER_PATHS": "NO",
        "GCC_C_LANGUAGE_STANDARD": "gnu99",
        "GCC_WARN_ABOUT_MISSING_PROTOTYPES": "YES",
        "GCC_WARN_ABOUT_RETURN_TYPE": "YES",
        "GCC_WARN_UNUSED_VARIABLE": "YES",
        "COPY_PHASE_STRIP": "YES",
    },
    ("all", "debug"): {
        "COPY_PHASE_STRIP": "NO",
        "GCC_DYNAMIC_NO_PIC": "NO",
        "GCC_OPTIMIZATION_LEVEL": "0",
        "GCC_PREPROCESSOR_DEFINITIONS": ["DEBUG=1", "$(inherited)"],
        "GCC_SYMBOLS_PRIVATE_EXTERN": "NO",
    },
    ("all", "release"): {
        "VALIDATE_PRODUCT": "YES",
    },
    "ios": {
        "ARCHS": "$(ARCHS_STANDARD_32_BIT)",
        "DSTROOT": "/tmp/xcodeproj.dst",
        "GCC_PRECOMPILE_PREFIX_HEADER": "YES",
        "GCC_THUMB_SUPPORT": "NO",
        "GCC_VERSION": "com.apple.compilers.llvm.clang.1_0",
        "INSTALL_PATH": "$(BUILT_PRODUCTS_DIR)",
        "IPHONEOS_DEPLOYMENT_TARGET": "4.3",
        "OTHER_LDFLAGS": "-ObjC",
        "PRODUCT_NAME": "$(TARGET_NAME)",
        "PUBLIC_HEADERS_FOLDER_PATH": "$(TARGET_NAME)",
        "SDKROOT": "iphoneos",
        "SKIP_INSTALL": "YES",
    },
    ("ios", "debug"): {
        "GCC_OPTIMIZATION_LEVEL": "0",
    },
    ("ios", "release"): {
        "OTHER_CFLAGS": ["-DNS_BLOCK_ASSERTIONS=1", "$(inherited)"],
        "VALIDATE_PRODUCT": "YES",
    },
    "osx": {
        "ARCHS": "$(ARCHS_STANDARD_64_BIT)",
        "DSTROOT": "/tmp/xcodeproj.dst",
        "INSTALL_PATH": "$(BUILT_PRODUCTS_DIR)",
        "MACOSX_DEPLOYMENT_TARGET": "10.7",
        "PRODUCT_NAME": "$(TARGET_NAME)",
        "SDKROOT": "macosx",
        "SKIP_INSTALL": "YES",
    },
}


def _normalize_key(key: RawKey) -> SettingsKey:
    parts = (key,) if isinstance(key, str) else tuple(key)
    if not parts or len(parts) > 2:
        raise ValueError(f"settings key must be a platform or (platform, configuration) pair: {key!r}")
    return tuple(part.lower() for part in parts)


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return str(value)


def _thaw(value: Any) -> BuildSettingValue:
    if isinstance(value, tuple):
        return list(value)
    return value


class BuildSettingsTable(Mapping[SettingsKey, Mapping[str, Any]]):
    """Immutable lookup of partial build settings.

    Keys are either a platform tag such as ``("ios",)`` or a platform and
    configuration pair such as ``("ios", "release")``. Plain strings are accepted
    wherever a single-element key is expected. List values are stored as tuples
    and handed out again as fresh lists.
    """

    def __init__(self, entries: Mapping[RawKey, Mapping[str, Any]] | Iterable[tuple[RawKey, Mapping[str, Any]]]) -> None:
        items = entries.items() if isinstance(entries, Mapping) else entries
        table: dict[SettingsKey, Mapping[str, Any]] = {}
        for key, settings in items:
            frozen = {name: _freeze(value) for name, value in settings.items()}
            table[_normalize_key(key)] = MappingProxyType(frozen)
        self._table = MappingProxyType(table)

    def __getitem__(self, key: RawKey) -> Mapping[str, Any]:  # type: ignore[override]
        return self._table[_normalize_key(key)]

    def __iter__(self) -> Iterator[SettingsKey]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, tuple)):
            return False
        try:
            return _normalize_key(key) in self._table
        except ValueError:
            return False

    def common(self, platform: str) -> dict[str, BuildSettingValue]:
        """Settings shared by every configuration of ``platform``."""

        return {name: _thaw(value) for name, value in self._table.get((platform.lower(),), {}).items()}

    def for_configuration(self, platform: str, configuration: str) -> dict[str, BuildSettingValue] | None:
        """Settings specific to ``configuration`` on ``platform``, if the table has any."""

        settings = self._table.get((platform.lower(), configuration.lower()))
        if settings is None:
            return None
        return {name: _thaw(value) for name, value in settings.items()}

    def resolve(
        self,
        platform: str,
        configuration: str,
        overrides: Mapping[str, BuildSettingValue] | None = None,
        *,
        excluded: Iterable[str] = (),
    ) -> dict[str, BuildSettingValue]:
        """Merge the settings for one configuration.

        The result starts from :meth:`common`, is updated with
        :meth:`for_configuration` when present, then with ``overrides``. Keys in
        ``excluded`` are removed last.
        """

        settings = self.common(platform)
        specific = self.for_configuration(platform, configuration)
        if specific:
            settings.update(specific)
        for name, value in (overrides or {}).items():
            settings[name] = list(value) if isinstance(value, (list, tuple)) else value
        for name in excluded:
            settings.pop(name, None)
        return settings


DEFAULT_BUILD_SETTINGS = BuildSettingsTable(COMMON_BUILD_SETTINGS)


def project_settings(project_name: str) -> dict[str, BuildSettingValue]:
    """Settings every generated application target needs on top of the defaults."""

    return {
        "GCC_PREFIX_HEADER": f"src/{project_name}-Prefix.pch",
        "OTHER_LDFLAGS": ["-ObjC", "-lxml2"],
        "HEADER_SEARCH_PATHS": "/usr/include/libxml2",
        "INFOPLIST_FILE": f"src/{project_name}-Info.plist",
        "SKIP_INSTALL": "NO",
        "IPHONEOS_DEPLOYMENT_TARGET": "5.0",
    }
