from collections.abc import Callable
from pathlib import Path
from typing import Any

from attrs import asdict, define, field, fields

# rpmlint flags `description-line-too-long` past this column.
DESCRIPTION_WRAP_WIDTH: int = 100

DEFAULT_NAME: str = "electron"
DEFAULT_VERSION: str = "0.0.0"
DEFAULT_REVISION: str = "1"
DEFAULT_REQUIRES: tuple[str, ...] = ("lsb",)
DEFAULT_CATEGORIES: tuple[str, ...] = ("GNOME", "GTK", "Utility")
DEFAULT_ICON: Path = Path(__file__).parent / "resources" / "icon.png"


def default_rename(dest: str, src: str) -> str:
    return dest + src


@define(frozen=True, slots=True)
class PackageOptions:
    name: str
    product_name: str
    generic_name: str
    description: str
    product_description: str
    version: str
    revision: str
    src: str
    dest: str
    arch: str | None = None
    license: str | None = None
    homepage: str | None = None
    bin: str = ""
    icon: str = str(DEFAULT_ICON)
    requires: tuple[str, ...] = field(default=DEFAULT_REQUIRES, converter=tuple)
    categories: tuple[str, ...] = field(default=DEFAULT_CATEGORIES, converter=tuple)
    exclude: tuple[str, ...] = field(default=(), converter=tuple)
    rename: Callable[[str, str], str] = field(default=default_rename, eq=False)

    def __attrs_post_init__(self) -> None:
        if not self.bin:
            object.__setattr__(self, "bin", self.name)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def template_context(self, **extra: Any) -> dict[str, Any]:
        """Returns the mapping templates are rendered against."""
        context = asdict(self, recurse=False, filter=lambda a, _: a.name != "rename")
        context.update(extra)
        return context


@define(frozen=True, slots=True)
class StagingTree:
    """The `rpmbuild` top directory an invocation builds into."""

    root: Path
    name: str
    arch: str

    @property
    def specs_dir(self) -> Path:
        return self.root / "SPECS"

    @property
    def spec_file(self) -> Path:
        return self.specs_dir / f"{self.name}.spec"

    @property
    def macros_file(self) -> Path:
        return self.root / "rpmmacros"

    @property
    def build_dir(self) -> Path:
        return self.root / "BUILD"

    @property
    def bin_dir(self) -> Path:
        return self.build_dir / "usr" / "bin"

    @property
    def share_dir(self) -> Path:
        return self.build_dir / "usr" / "share"

    @property
    def application_dir(self) -> Path:
        return self.share_dir / self.name

    @property
    def applications_dir(self) -> Path:
        return self.share_dir / "applications"

    @property
    def pixmaps_dir(self) -> Path:
        return self.share_dir / "pixmaps"

    @property
    def doc_dir(self) -> Path:
        return self.share_dir / "doc" / self.name

    @property
    def rpms_dir(self) -> Path:
        return self.root / "RPMS" / self.arch

    def layout(self) -> tuple[Path, ...]:
        return (
            self.specs_dir,
            self.bin_dir,
            self.application_dir,
            self.applications_dir,
            self.pixmaps_dir,
            self.doc_dir,
            self.rpms_dir,
        )


@define(frozen=True, slots=True)
class InstallerResult:
    options: PackageOptions
    staging_root: Path
    artifacts: tuple[Path, ...] = field(converter=tuple)
