"""Command line interface for testing configuration loading"""
from pathlib import Path

from . import DEFAULTS, SettingsError, get_settings

SECRET_KEYS = {'x_access_token'}

def write_example(examples_dir: Path = Path("examples")) -> Path:
    """Write an example settings.conf with every default spelled out."""
    examples_dir.mkdir(exist_ok=True)
    lines = [
        "[DEFAULT]",
        "# Database connection URL (required)",
        "db_url = postgresql://postgres@localhost:5432/stage_db",
    ]
    lines.extend(f"{key} = {value}" for key, value in DEFAULTS.items())

    example_path = examples_dir / "settings.conf.example"
    with open(example_path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return example_path

def main():
    """Display loaded configuration"""
    try:
        settings = get_settings()
    except SettingsError as e:
        print(str(e))
        settings = None

    if settings:
        print("\nSettings Configuration:")
        print("-" * 50)
        for key, value in settings.items():
            if key in SECRET_KEYS and value:
                value = "********"
            print(f"{key}: {value}")

    # Save example configuration file
    example_path = write_example()
    print(f"\nExample configuration written to {example_path}")

if __name__ == "__main__":
    main()
