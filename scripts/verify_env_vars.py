import re
from pathlib import Path

from synapse_bpm.config import Settings


def declared_env_vars():
    """Environment variables the Settings model reads."""
    return sorted(field.alias for field in Settings.model_fields.values() if field.alias)


def find_env_vars():
    """Find environment variables referenced directly in code."""
    env_vars = set()
    for py_file in Path("synapse_bpm").rglob("*.py"):
        content = py_file.read_text(encoding="utf-8", errors="ignore")
        env_vars.update(re.findall(r'os\.getenv\(["\']([A-Z0-9_]+)["\']', content))
        env_vars.update(re.findall(r'os\.environ\[\s*["\']([A-Z0-9_]+)["\']\s*\]', content))
    return sorted(env_vars)


def verify_against_env_example(path: str = ".env.example"):
    example = Path(path)
    documented = set()
    if example.exists():
        for line in example.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                documented.add(line.split("=", 1)[0].strip())

    used = set(declared_env_vars()) | set(find_env_vars())
    missing = sorted(used - documented)
    unused = sorted(documented - used)

    print("=== ENV VAR VERIFICATION ===")
    print(f"Code references: {len(used)} unique vars")
    print(f"{path} has: {len(documented)} vars")
    print("")
    if missing:
        print(f"UNDOCUMENTED ({len(missing)}):")
        for v in missing:
            print(f"  - {v}")
    else:
        print("Every variable is documented.")
    print("")
    if unused:
        print(f"UNUSED IN CODE ({len(unused)}):")
        for v in unused:
            print(f"  - {v}")
    else:
        print("No unused documented vars.")


if __name__ == "__main__":
    verify_against_env_example()
