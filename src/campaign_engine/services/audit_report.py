# src/campaign_engine/services/audit_report.py
"""
Read-only reporting over the campaign audit trail.

The engine only writes audit rows; this module is the back-office side that
reads them back into pandas for summaries and exports.
"""

from datetime import datetime
from typing import Optional
import logging

import pandas as pd
from sqlalchemy.orm import Session

from ..core.types import AuditStatistics
from ..models import AuditRecord, DiscountRule

logger = logging.getLogger(__name__)

AUDIT_COLUMNS = ["id", "rule_id", "item_id", "old_price", "new_price", "discount_amount", "timestamp"]


class AuditReport:
    """Builds DataFrames from the audit table."""

    def __init__(self, session: Session):
        self.session = session

    def load(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> pd.DataFrame:
        """Audit rows as a DataFrame, oldest first, money columns as floats."""
        query = self.session.query(AuditRecord)
        if since is not None:
            query = query.filter(AuditRecord.timestamp >= since)
        if until is not None:
            query = query.filter(AuditRecord.timestamp <= until)

        rows = [
            {column: getattr(record, column) for column in AUDIT_COLUMNS}
            for record in query.order_by(AuditRecord.timestamp.asc(), AuditRecord.id.asc())
        ]
        df = pd.DataFrame(rows, columns=AUDIT_COLUMNS)
        for column in ("old_price", "new_price", "discount_amount"):
            df[column] = df[column].astype(float)
        return df

    def by_rule(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> pd.DataFrame:
        """
        One row per rule: number of changes, distinct items, total and
        average discount, first and last change. Sorted by total discount.
        """
        df = self.load(since, until)
        if df.empty:
            return pd.DataFrame(
                columns=["rule_id", "rule_name", "changes", "items", "total_discount",
                         "avg_discount", "first_change", "last_change"]
            )

        summary = (
            df.groupby("rule_id")
            .agg(
                changes=("id", "count"),
                items=("item_id", "nunique"),
                total_discount=("discount_amount", "sum"),
                avg_discount=("discount_amount", "mean"),
                first_change=("timestamp", "min"),
                last_change=("timestamp", "max"),
            )
            .reset_index()
        )
        summary["total_discount"] = summary["total_discount"].round(2)
        summary["avg_discount"] = summary["avg_discount"].round(2)

        names = dict(
            self.session.query(DiscountRule.id, DiscountRule.name)
            .filter(DiscountRule.id.in_(summary["rule_id"].tolist()))
            .all()
        )
        summary.insert(1, "rule_name", summary["rule_id"].map(names))
        return summary.sort_values(["total_discount", "rule_id"], ascending=[False, True]).reset_index(drop=True)

    def statistics(self) -> AuditStatistics:
        df = self.load()
        if df.empty:
            return AuditStatistics()

        return AuditStatistics(
            records=len(df),
            rules=int(df["rule_id"].nunique()),
            items=int(df["item_id"].nunique()),
            total_discount=round(float(df["discount_amount"].sum()), 2),
            first_change=df["timestamp"].min().to_pydatetime(),
            last_change=df["timestamp"].max().to_pydatetime(),
        )
