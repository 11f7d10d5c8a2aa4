"""
Build SQLite plan catalog for FastAPI
-------------------------------------
Input:  briki/data/plans/<category>/*.json
Output: briki/data/plans.sqlite
"""

import json
import sqlite3
from pathlib import Path

import pandas as pd

from briki import config
from briki.services.plan_catalog import JSON_COLUMNS, load_plans_from_json


def plans_dataframe(plans_dir: Path = config.PLANS_DIR) -> pd.DataFrame:
    plans = load_plans_from_json(plans_dir)
    rows = [p.model_dump(by_alias=True, mode="json") for p in plans]
    df = pd.DataFrame(rows)
    # Nested values go in as JSON text
    for col in JSON_COLUMNS:
        if col in df.columns:
            df[col] = df[col].map(lambda v: None if v is None else json.dumps(v, ensure_ascii=False))
    return df


def build_sqlite(plans_dir: Path = config.PLANS_DIR, out_db: Path = config.SQLITE_PATH):
    df = plans_dataframe(plans_dir)
    if df.empty:
        raise FileNotFoundError(f"No plan JSON files found under {plans_dir}")
    print(f"Loaded {len(df)} plans from {plans_dir}")

    out_db.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(out_db) as conn:
        df.to_sql("plans", conn, index=False, if_exists="replace")
        conn.commit()

    print(f"✅ SQLite database created at {out_db}")
    return out_db


if __name__ == "__main__":
    build_sqlite()
