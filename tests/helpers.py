"""Builders for Textract-shaped block lists."""


def kv_blocks(pairs: dict[str, str]) -> list[dict]:
    """KEY/VALUE sets whose text lives in CHILD WORD blocks."""
    blocks: list[dict] = []
    for idx, (label, value) in enumerate(pairs.items()):
        blocks.extend([
            {
                "Id": f"key-{idx}",
                "BlockType": "KEY_VALUE_SET",
                "EntityTypes": ["KEY"],
                "Relationships": [
                    {"Type": "CHILD", "Ids": [f"key-word-{idx}"]},
                    {"Type": "VALUE", "Ids": [f"value-{idx}"]},
                ],
            },
            {"Id": f"key-word-{idx}", "BlockType": "WORD", "Text": label},
            {
                "Id": f"value-{idx}",
                "BlockType": "KEY_VALUE_SET",
                "EntityTypes": ["VALUE"],
                "Relationships": [{"Type": "CHILD", "Ids": [f"value-word-{idx}"]}],
            },
            {"Id": f"value-word-{idx}", "BlockType": "WORD", "Text": value},
        ])
    return blocks


def line_blocks(*lines: str, confidence: float = 95.0) -> list[dict]:
    return [
        {"Id": f"line-{i}", "BlockType": "LINE", "Text": text, "Confidence": confidence}
        for i, text in enumerate(lines)
    ]
