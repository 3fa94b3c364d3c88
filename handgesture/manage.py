# handgesture/manage.py
import json
import sys
import traceback

import pandas as pd
import requests

from handgesture.services.recognition_pipeline import RecognitionPipeline
from handgesture.services.template_store import build_template_store


def load_dataset(source: str):
    """Read a gesture dataset blob from a file path or an http(s) URL."""
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=30)
        response.raise_for_status()
        data = response.json()
    else:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)

    # some APIs wrap the list as {"data": [...]}
    if isinstance(data, dict):
        data = data.get("data", [])
    return data


def summarize_templates(templates) -> pd.DataFrame:
    return pd.DataFrame(
        [{"name": t.name, "frame_count": t.frame_count, "created_at": t.created_at} for t in templates],
        columns=["name", "frame_count", "created_at"],
    )


def main(argv):
    mode = argv[1].lower() if len(argv) > 1 else "list"
    pipeline = RecognitionPipeline(build_template_store())

    try:
        if mode == "list":
            for i, t in enumerate(pipeline.load_templates()):
                print(f"[{i}] {t.name} - {t.frame_count} frames - {t.created_at.isoformat()}")

        elif mode == "summary":
            df = summarize_templates(pipeline.load_templates())
            print(f"✅ Total gestures: {len(df)}\n")
            if not df.empty:
                print(df.groupby("name")["frame_count"].describe(), "\n")

        elif mode == "export":
            out_path = argv[2] if len(argv) > 2 else "gesture_datasets_export.json"
            records = pipeline.export_templates()
            with open(out_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            print(f"💾 Exported {len(records)} gesture datasets to {out_path}")

        elif mode == "import":
            if len(argv) < 3:
                print("💡 Use: import <file-or-url>")
                return 1
            imported, rejected = pipeline.import_templates(load_dataset(argv[2]))
            print(f"✅ Imported {imported} gesture datasets")
            for result in rejected:
                print(f"⚠️ Skipped '{result.name}': {result.message}")

        elif mode == "clear":
            if pipeline.delete_all_templates():
                print("🗑️ Deleted all gesture datasets")
            else:
                print("❌ Could not delete gesture datasets")
                return 1

        else:
            print(f"❌ Unknown mode '{mode}'.")
            print("💡 Use: list, summary, export, import, or clear")
            return 1

    except Exception as e:
        print(f"❌ Error in {mode} mode: {e}")
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
