"""
List the LangSmith datasets visible to the configured API key.

Usage:
    python -m evals.check_datasets
"""

import sys

from evals.config import get_langsmith_client


def check_datasets() -> None:
    client = get_langsmith_client()
    print("Listing all datasets:\n")

    for dataset in client.list_datasets():
        example_count = getattr(dataset, "example_count", None)
        print(f"Dataset: {dataset.name}")
        print(f"  ID: {dataset.id}")
        print(f"  Example count: {example_count if example_count is not None else 'unknown'}")
        print(f"  Created: {dataset.created_at}")
        print("")


if __name__ == "__main__":
    try:
        check_datasets()
    except Exception as e:
        print(f"❌ Failed to list datasets: {e}")
        sys.exit(1)
