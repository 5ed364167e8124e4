import argparse
import logging
import sys
from pathlib import Path

# Add project root to sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.append(str(PROJECT_ROOT))

from services.db.connection import get_engine
from services.db.models import EdgeKind
from services.relations.audit import find_counter_drift
from sqlmodel import Session

logging.basicConfig(format='%(message)s', level=logging.INFO)


def verify(db_path=None, kinds=None) -> int:
    engine = get_engine(db_path)
    total = 0
    with Session(engine) as session:
        for kind in kinds or list(EdgeKind):
            drifts = find_counter_drift(session, kind)
            if not drifts:
                print(f"✅ {kind.value}: counters match edges")
                continue
            total += len(drifts)
            print(f"❌ {kind.value}: {len(drifts)} targets drifted")
            for drift in drifts:
                print(f"   {drift.target_id}: stored={drift.stored} actual={drift.actual} (delta {drift.delta:+d})")
    return total


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="对账：冗余计数器 vs 实际关系边数 (只读)")
    parser.add_argument("--db", default=None, help="数据库路径，默认读取 VN_DB_PATH / VN_DATABASE_URL")
    parser.add_argument(
        "--kind",
        action="append",
        choices=[k.value for k in EdgeKind],
        help="只检查指定关系，可重复；默认全部",
    )
    args = parser.parse_args()

    kinds = [EdgeKind(k) for k in args.kind] if args.kind else None
    drifted = verify(args.db, kinds)
    sys.exit(1 if drifted else 0)
