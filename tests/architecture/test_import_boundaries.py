"""
Import-boundary enforcement for the payroll layers.

1. Engine purity      -- detailing_engines/** may not import DB, ORM,
                         modules, or config layers.
2. Engine no-impure   -- detailing_engines/** may not call wall-clock or
                         environment functions.
3. Config centralisation -- only detailing_config/ may import
                         detailing_config.loader.
4. Dependency direction -- validates the full dependency DAG.

All scanning is done via AST -- these tests are read-only.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _python_files(root: str) -> list[str]:
    """Return all .py files under *root* (relative to the repo), sorted."""
    return sorted(
        str(Path(p).relative_to(ROOT))
        for p in glob.glob(f"{ROOT / root}/**/*.py", recursive=True)
    )


def _parse(filepath: str) -> ast.AST | None:
    try:
        return ast.parse((ROOT / filepath).read_text(), filename=filepath)
    except (SyntaxError, UnicodeDecodeError):
        return None


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    """True if *module* equals or is a child of any prefix."""
    for prefix in prefixes:
        if module == prefix or module.startswith(f"{prefix}."):
            return True
    return False


def _extract_attribute_calls(filepath: str) -> list[tuple[int, str]]:
    """Return (line_number, 'receiver.attr') for two-level attribute references."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            results.append((node.lineno, f"{node.value.id}.{node.attr}"))
    return results


# ---------------------------------------------------------------------------
# 1. TestEnginePurity
# ---------------------------------------------------------------------------

class TestEnginePurity:
    """detailing_engines/** may not import DB drivers, ORM, kernel db,
    modules, or config."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "yaml",
        "detailing_kernel.db",
        "detailing_config",
        "detailing_modules",
    )

    def test_engine_files_have_no_forbidden_imports(self):
        violations: list[str] = []

        for filepath in _python_files("detailing_engines"):
            for lineno, module in _extract_imports(filepath):
                if _matches_any(module, self.FORBIDDEN_PREFIXES):
                    violations.append(f"  {filepath}:{lineno} imports '{module}'")

        assert not violations, (
            "Engine purity violation -- detailing_engines/** must not import "
            "DB drivers, ORM, kernel db, config, or modules:\n"
            + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 2. TestEngineNoImpureFunctions
# ---------------------------------------------------------------------------

class TestEngineNoImpureFunctions:
    """detailing_engines/** may not call wall-clock or environment functions.

    Allowed (observational-only):
        time.monotonic
    """

    FORBIDDEN_CALLS = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "date.today",
        "time.time",
        "os.environ",
        "os.getenv",
    })

    def test_no_impure_calls_in_engines(self):
        violations: list[str] = []

        for filepath in _python_files("detailing_engines"):
            for lineno, qualname in _extract_attribute_calls(filepath):
                if qualname in self.FORBIDDEN_CALLS:
                    violations.append(f"  {filepath}:{lineno} calls '{qualname}'")

        assert not violations, (
            "Engine impurity violation -- use an injected Clock instead:\n"
            + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 3. TestConfigCentralization
# ---------------------------------------------------------------------------

class TestConfigCentralization:
    """Only detailing_config/ may import detailing_config.loader.

    Everyone else goes through the package (``get_active_config`` and the
    re-exported helpers).
    """

    FORBIDDEN_INTERNAL_MODULES = ("detailing_config.loader",)

    def test_no_external_import_of_config_internals(self):
        violations: list[str] = []

        for root in ("detailing_kernel", "detailing_engines", "detailing_modules", "scripts", "tests"):
            for filepath in _python_files(root):
                for lineno, module in _extract_imports(filepath):
                    if _matches_any(module, self.FORBIDDEN_INTERNAL_MODULES):
                        violations.append(f"  {filepath}:{lineno} imports '{module}'")

        assert not violations, (
            "Config centralisation violation -- import from detailing_config, "
            "not detailing_config.loader:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 4. TestDependencyDirection
# ---------------------------------------------------------------------------

class TestDependencyDirection:
    """Verify the dependency DAG:

    Allowed edges (-> means "may import"):
        detailing_config  -> detailing_modules, detailing_engines, detailing_kernel
        detailing_modules -> detailing_engines, detailing_kernel
        detailing_engines -> detailing_kernel.domain, .exceptions, .logging_config
        detailing_kernel  -> (stdlib, sqlalchemy + internal)

    The one sanctioned upward edge is ``create_tables`` importing the
    payroll ORM so ``Base.metadata`` sees every table.
    """

    RULES: list[tuple[str, tuple[str, ...]]] = [
        ("detailing_engines", ("detailing_kernel.db", "detailing_config", "detailing_modules")),
        ("detailing_modules", ("detailing_config",)),
        ("detailing_kernel", ("detailing_engines", "detailing_config", "detailing_modules")),
    ]

    ALLOWED: set[tuple[str, str]] = {
        ("detailing_kernel/db/engine.py", "detailing_modules.payroll.orm"),
    }

    def test_dependency_dag(self):
        violations: list[str] = []

        for source_root, forbidden in self.RULES:
            for filepath in _python_files(source_root):
                normalised = filepath.replace("\\", "/")
                for lineno, module in _extract_imports(filepath):
                    if (normalised, module) in self.ALLOWED:
                        continue
                    if _matches_any(module, forbidden):
                        violations.append(
                            f"  [{source_root}] {filepath}:{lineno} imports '{module}'"
                        )

        assert not violations, (
            "Dependency direction violation -- the following imports break "
            "the layered architecture DAG:\n" + "\n".join(violations)
        )

    def test_allowed_exceptions_still_exist(self):
        """A sanctioned edge that disappears must be dropped from ALLOWED."""
        present = {
            (filepath.replace("\\", "/"), module)
            for root in ("detailing_kernel",)
            for filepath in _python_files(root)
            for _, module in _extract_imports(filepath)
        }
        assert self.ALLOWED <= present
