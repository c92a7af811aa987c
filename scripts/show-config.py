#!/usr/bin/env python3
"""Display current SmartMark classifier configuration.

Read-only: prints resolved values, with credentials shown only as set/unset.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from smartmark.config import get_config
from smartmark.errors import SmartMarkError
from smartmark.models import ProviderName


def main() -> None:
    """Display current configuration."""
    try:
        config = get_config()
    except Exception as e:
        print(f"\nConfiguration Error: {e}\n", file=sys.stderr)
        sys.exit(1)

    print("\n" + "=" * 70)
    print("  SmartMark Classifier Configuration")
    print("=" * 70 + "\n")

    print(f"  Active provider: {config.ai_provider.value}")

    print("\n  Providers:")
    for name in ProviderName:
        try:
            descriptor = config.provider_descriptor(name)
        except SmartMarkError as e:
            print(f"    {name.value:<11} error: {e.message}")
            continue
        key_state = "set" if descriptor.api_key else "unset"
        print(
            f"    {name.value:<11} {descriptor.base_url}  model={descriptor.model}  key={key_state}"
        )

    print("\n  Request:")
    print(f"    Temperature:        {config.temperature}")
    print(f"    Max output tokens:  {config.max_output_tokens}")
    print(f"    Timeout:            {config.request_timeout}s")

    print("\n  Classification:")
    print(f"    Max context tokens: {config.max_context_tokens:,}")
    print(f"    Taxonomy cache TTL: {config.cache_ttl_seconds}s")
    print(f"    Max suggestions:    {config.max_suggestions}")
    print(f"    Fallback folder:    {config.fallback_folder}")

    print("\n  Logging:")
    print(f"    Level:  {config.log_level}")
    print(f"    Format: {config.log_format}")

    print("\n" + "=" * 70 + "\n")
    print("  To modify configuration:")
    print("    1. Copy .env.example to .env")
    print("    2. Edit .env with your values (SMARTMARK_ prefix)")
    print("\n" + "=" * 70 + "\n")


if __name__ == "__main__":
    main()
