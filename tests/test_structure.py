"""
Structure lint tests.
Verify the project layout and component conventions.
"""

from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


class TestProjectStructure:
    """Verify project structure follows the ports/adapters layout."""

    def test_core_directories_exist(self) -> None:
        """Core functional directories must exist."""
        assert (PROJECT_ROOT / "src" / "core").is_dir()
        assert (PROJECT_ROOT / "src" / "core" / "ports").is_dir()
        assert (PROJECT_ROOT / "src" / "domain").is_dir()

    def test_adapters_directory_exists(self) -> None:
        """Adapters directory must exist."""
        assert (PROJECT_ROOT / "src" / "adapters" / "sqlite").is_dir()
        assert (PROJECT_ROOT / "src" / "adapters" / "memory").is_dir()

    def test_rules_and_migrations_exist(self) -> None:
        assert (PROJECT_ROOT / "rules.yaml").is_file()
        migrations = sorted(p.name for p in (PROJECT_ROOT / "migrations").glob("*.sql"))
        assert migrations[0].startswith("001_")


class TestComponentConventions:
    """Components expose entry points, models and ports."""

    def test_scheduler_component_files(self) -> None:
        component = PROJECT_ROOT / "src" / "components" / "scheduler"
        for name in ("__init__.py", "component.py", "models.py", "ports.py"):
            assert (component / name).is_file(), name

    def test_core_does_not_import_adapters(self) -> None:
        """The functional core must not depend on adapters or the API."""
        core_dirs = [PROJECT_ROOT / "src" / "core", PROJECT_ROOT / "src" / "domain"]
        for core in core_dirs:
            for path in core.rglob("*.py"):
                text = path.read_text()
                assert "src.adapters" not in text, path
                assert "src.api" not in text, path
