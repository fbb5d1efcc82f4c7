"""
Minimal integration example for a conversation manager.

Usage:
    python examples/minimal.py
"""

from prune import ConversationHistory, PruneConfig, PrunePolicy


def main() -> None:
    """Replay a long conversation into a small budget and report what survived."""

    config = PruneConfig(
        max_tokens=2_000,
        policy=PrunePolicy(min_messages=4, full_retention_count=6),
        telemetry_enabled=False,
    )
    history = ConversationHistory.from_config(config)

    history.record_item(
        {"role": "system", "content": "SYSTEM: Only edit files under tests/."}
    )
    for i in range(40):
        history.record_items(
            [
                {"role": "user", "content": f"Step {i}: what does the parser do next?"},
                {
                    "role": "assistant",
                    "content": f"Step {i} walks the token stream. " + "detail " * 60,
                },
            ]
        )

    # set_min_messages only constrains removal; it never pads the history
    history.set_min_messages(8)

    for item in history.items()[:3]:
        print(f"{item.role:>9}: {item.content[:60]}")
    print(history.get_migration_report())


if __name__ == "__main__":
    main()
