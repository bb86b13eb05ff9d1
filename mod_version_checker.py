#!/usr/bin/env python3
"""
Fabric Mod Version Checker
==========================
Lists the Fabric mods installed in a mods folder and shows the newest
Minecraft version each one supports according to Modrinth.

Features:
- Scans your mods folder and reads the mod ID from each jar's fabric.mod.json
- Looks up all mods on Modrinth with a single batched request
- Picks the newest supported game version using semantic version ordering
- Prints a sorted summary table

Usage:
    python mod_version_checker.py --mods-folder /path/to/.minecraft/mods

Requirements:
    pip install requests semver rich
"""

__version__ = "1.0.0"

import argparse
import json
import re
import sys
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
import semver
from rich import box
from rich.console import Console
from rich.table import Table


# ============================================================================
# CONFIGURATION
# ============================================================================

MODRINTH_API = "https://api.modrinth.com/v2/projects"
REQUEST_TIMEOUT = 5  # seconds

MOD_EXTENSION = ".jar"
METADATA_FILE = "fabric.mod.json"

NO_VERSIONS = "no versions"

TABLE_MAX_WIDTH = 10_000

USER_AGENT = f"fabric-mod-version-checker/{__version__}"


# ============================================================================
# ERRORS
# ============================================================================

class ModCheckerError(Exception):
    """Base class for errors that stop a run."""


class ScanError(ModCheckerError):
    """The mods folder could not be listed."""


class RegistryError(ModCheckerError):
    """Modrinth could not be queried or returned something unusable."""


# ============================================================================
# DATA MODEL
# ============================================================================

@dataclass
class ModRecord:
    """One installed mod file.

    ``version`` stays empty until the registry lookup fills it in.
    """
    filename: str
    mod_id: str
    version: str = ""


# ============================================================================
# VERSION SELECTION
# ============================================================================

# MAJOR or MAJOR.MINOR, padded to three parts; no pre-release or build allowed
SHORT_VERSION_PATTERN = re.compile(r'(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))?')


def parse_semver(label: str) -> Optional[semver.Version]:
    """Parse a version label, returning None if it isn't a semantic version.

    Short labels such as "1.20" count as "1.20.0", but only without a
    pre-release or build suffix, so "1.21-rc1" is rejected. Surrounding
    whitespace makes a label invalid.
    """
    if not label or label != label.strip():
        return None
    if SHORT_VERSION_PATTERN.fullmatch(label):
        label += '.0' * (2 - label.count('.'))
    try:
        return semver.Version.parse(label)
    except ValueError:
        return None


def find_top_version(versions: list[str]) -> str:
    """Return the newest valid version label, or NO_VERSIONS if there is none.

    Labels that aren't semantic versions (snapshots like "23w13a", free text)
    are ignored. Ordering follows semantic versioning: numeric per component,
    and a pre-release sorts below its release, so "1.10.0" beats "1.9.0" and
    "1.0.0" beats "1.0.0-1".
    """
    candidates = []
    for label in versions:
        parsed = parse_semver(label)
        if parsed is not None:
            candidates.append((parsed, label))

    if not candidates:
        return NO_VERSIONS

    # "1.20" and "1.20.0" compare equal; the label text breaks the tie
    candidates.sort()
    return candidates[-1][1]


# ============================================================================
# MOD SCANNER
# ============================================================================

def extract_mod_id(mod_zip: zipfile.ZipFile) -> str:
    """Read the mod ID from the fabric.mod.json inside an open jar.

    Returns an empty string when the jar has no metadata, the metadata can't
    be parsed, or it has no string "id" field.
    """
    for info in mod_zip.infolist():
        if info.filename != METADATA_FILE:
            continue

        try:
            raw = mod_zip.read(info)
            mod_info = json.loads(raw.decode('utf-8-sig'))
        except (UnicodeDecodeError, json.JSONDecodeError, zipfile.BadZipFile, OSError) as e:
            print(f"Skipping {mod_zip.filename}: unreadable {METADATA_FILE}: {e}")
            return ""

        if not isinstance(mod_info, dict):
            return ""

        mod_id = mod_info.get('id')
        if not isinstance(mod_id, str):
            return ""
        return mod_id

    return ""


class ModScanner:
    """Scans a mods folder and identifies Fabric mod jars."""

    def __init__(self, mods_path: Path):
        self.mods_path = mods_path

    def scan(self) -> list[ModRecord]:
        """Scan the mods folder (not its subfolders) and return one record per mod jar."""
        if not self.mods_path.is_dir():
            raise ScanError(f"Mods folder not found at {self.mods_path}")

        try:
            entries = sorted(self.mods_path.iterdir())
        except OSError as e:
            raise ScanError(f"Could not list {self.mods_path}: {e}") from e

        mods = []
        for file_path in entries:
            if not file_path.is_file():
                continue
            if not file_path.name.endswith(MOD_EXTENSION):
                continue

            mod_id = self._read_mod_id(file_path)
            if not mod_id:
                continue

            mods.append(ModRecord(filename=file_path.name, mod_id=mod_id))

        return mods

    def _read_mod_id(self, file_path: Path) -> str:
        """Open a jar and pull out its mod ID; bad jars are reported and skipped."""
        try:
            with zipfile.ZipFile(file_path, 'r') as mod_zip:
                return extract_mod_id(mod_zip)
        except (zipfile.BadZipFile, OSError) as e:
            print(f"Error opening {file_path}: {e}")
            return ""


# ============================================================================
# REGISTRY LOOKUP
# ============================================================================

class RegistryClient:
    """Looks up supported game versions for mods on Modrinth."""

    def __init__(
        self,
        api_url: str = MODRINTH_API,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})

    def fetch_game_versions(self, mod_ids: list[str]) -> list[dict]:
        """Fetch the projects for all mod IDs in one request.

        Returns a list of ``{"slug": ..., "game_versions": [...]}`` dicts.
        Raises RegistryError on any network problem or unexpected response,
        since showing wrong versions is worse than showing none.
        """
        params = {'ids': json.dumps(mod_ids)}
        try:
            response = self.session.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RegistryError(f"Modrinth request failed: {e}") from e

        try:
            projects = response.json()
        except ValueError as e:
            raise RegistryError(f"Modrinth returned invalid JSON: {e}") from e

        if not isinstance(projects, list):
            raise RegistryError("Modrinth returned an unexpected response (expected a list)")

        results = []
        for project in projects:
            if not isinstance(project, dict):
                raise RegistryError(f"Modrinth returned an unexpected project entry: {project!r}")
            slug = project.get('slug')
            game_versions = project.get('game_versions')
            if not isinstance(slug, str) or not isinstance(game_versions, list):
                raise RegistryError(f"Modrinth project entry is missing slug or game_versions: {project!r}")
            if not all(isinstance(v, str) for v in game_versions):
                raise RegistryError(f"Modrinth project {slug!r} has non-string game_versions: {game_versions!r}")
            results.append({'slug': slug, 'game_versions': game_versions})

        return results


def lookup_versions(mods: list[ModRecord], client: Optional[RegistryClient] = None) -> list[ModRecord]:
    """Fill in the newest supported game version for every mod.

    Every record sharing an ID gets the same version. Mods that Modrinth
    doesn't know about keep an empty version.
    """
    mod_ids = [m.mod_id for m in mods]
    if not mod_ids:
        return mods

    if client is None:
        client = RegistryClient()

    print(f"Checking {len(mod_ids)} mods on Modrinth...")
    projects = client.fetch_game_versions(mod_ids)

    for project in projects:
        top_version = find_top_version(project['game_versions'])
        for mod in mods:
            if mod.mod_id == project['slug']:
                mod.version = top_version

    unresolved = sorted({m.mod_id for m in mods if not m.version})
    if unresolved:
        print(f"Warning: not found on Modrinth: {', '.join(unresolved)}")

    return mods


# ============================================================================
# REPORT
# ============================================================================

def sort_mods(mods: list[ModRecord]) -> list[ModRecord]:
    """Sort by version, then by mod ID (plain string order)."""
    return sorted(mods, key=lambda m: (m.version, m.mod_id))


def render_table(mods: list[ModRecord], width: Optional[int] = None) -> str:
    """Render the mods as a boxed table and return it as text.

    Cells are never truncated. Without a width the table is as wide as its
    contents; a narrower width folds long cells onto extra lines.
    """
    table = Table(box=box.SQUARE)
    table.add_column("Filename", overflow="fold")
    table.add_column("ID", overflow="fold")
    table.add_column("Version", overflow="fold")

    for mod in sort_mods(mods):
        table.add_row(mod.filename, mod.mod_id, mod.version)

    console = Console(width=width if width is not None else TABLE_MAX_WIDTH, no_color=True, highlight=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


# ============================================================================
# COMMAND LINE INTERFACE
# ============================================================================

def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mod-version-checker",
        description="Show the newest Minecraft version each installed Fabric mod supports on Modrinth.",
    )
    parser.add_argument(
        "--mods-folder", "--modsFolder",
        dest="mods_folder",
        default="",
        help="Path to mods folder",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(args)


def main(args=None) -> int:
    """Main CLI entry point."""
    parsed = parse_args(args)

    if not parsed.mods_folder:
        print("Mods folder path not set")
        return 0

    mods_path = Path(parsed.mods_folder)

    try:
        mods = ModScanner(mods_path).scan()
        lookup_versions(mods)
    except ModCheckerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(render_table(mods), end='')
    return 0


if __name__ == "__main__":
    sys.exit(main())
