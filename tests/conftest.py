"""Shared fixtures: an in-memory stand-in for the Supabase REST client."""
import asyncio
import copy
import functools
import re
from typing import Dict, List

import pytest

from evano.core import supabase_rest_client


def _text(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _split_top_level(text: str) -> List[str]:
    """Split on commas that are not inside parentheses."""
    parts, depth, current = [], 0, ""
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += ch
    if current:
        parts.append(current)
    return parts


def _in_values(arg: str) -> List[str]:
    return [v.strip().strip('"') for v in arg.strip("()").split(",")]


def _matches_condition(row: dict, column: str, expr: str) -> bool:
    op, _, arg = expr.partition(".")
    value = row.get(column)
    if op == "eq":
        return _text(value) == arg
    if op == "neq":
        return _text(value) != arg
    if op == "is":
        return _text(value) == arg
    if op == "in":
        return _text(value) in _in_values(arg)
    if op == "ilike":
        pattern = "^" + re.escape(arg).replace(r"\*", ".*") + "$"
        return value is not None and re.match(pattern, str(value), re.IGNORECASE) is not None
    raise ValueError(f"Unsupported filter operator: {op}")


def _matches(row: dict, filters: Dict[str, str]) -> bool:
    for column, expr in (filters or {}).items():
        if column == "or":
            conditions = _split_top_level(expr[1:-1])
            if not any(_matches_condition(row, *cond.split(".", 1)) for cond in conditions):
                return False
        elif not _matches_condition(row, column, expr):
            return False
    return True


def _order(rows: List[dict], order: str) -> List[dict]:
    if not order:
        return rows
    keys = []
    for clause in order.split(","):
        parts = clause.split(".")
        desc = "desc" in parts
        if "nullsfirst" in parts:
            nulls_first = True
        elif "nullslast" in parts:
            nulls_first = False
        else:
            nulls_first = desc
        keys.append((parts[0], desc, nulls_first))

    def compare(a, b):
        for column, desc, nulls_first in keys:
            va, vb = a.get(column), b.get(column)
            if va is None and vb is None:
                continue
            if va is None:
                return -1 if nulls_first else 1
            if vb is None:
                return 1 if nulls_first else -1
            if va == vb:
                continue
            result = -1 if va < vb else 1
            return -result if desc else result
        return 0

    return sorted(rows, key=functools.cmp_to_key(compare))


class FakeSupabase:
    """Implements the subset of SupabaseRestClient the services use, over dicts."""

    def __init__(self, **tables):
        self.tables: Dict[str, List[dict]] = {name: [dict(r) for r in rows] for name, rows in tables.items()}
        self.failing_reads = set()
        self.failing_writes = set()
        self.failing_rpcs = set()
        self.rpc_calls = []
        self.signed_out = []
        self.sign_out_delay = 0.0
        self._next_id = 1

    def _project(self, row: dict, select: str) -> dict:
        if select == "*":
            return copy.deepcopy(row)
        result = {}
        for field in _split_top_level(select):
            embed = re.match(r"(\w+)\((.*)\)", field)
            if embed:
                table, columns = embed.groups()
                target = next(
                    (r for r in self.tables.get(table, []) if _text(r.get("id")) == _text(row.get("video_id"))),
                    None,
                )
                result[table] = self._project(target, columns) if target else None
            else:
                result[field] = row.get(field)
        return result

    async def get(self, table, select="*", filters=None, single=False, order=None,
                  limit=None, offset=None, use_admin=False, token=None):
        if table in self.failing_reads:
            return None if single else []
        rows = [r for r in self.tables.get(table, []) if _matches(r, filters)]
        rows = _order(rows, order)
        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        rows = [self._project(r, select) for r in rows]
        if single:
            return rows[0] if rows else None
        return rows

    async def insert(self, table, data, upsert=False, on_conflict=None, use_admin=False, token=None):
        if table in self.failing_writes:
            return None
        rows = self.tables.setdefault(table, [])
        if upsert and on_conflict:
            keys = on_conflict.split(",")
            for row in rows:
                if all(_text(row.get(k)) == _text(data.get(k)) for k in keys):
                    row.update(data)
                    return dict(row)
        row = dict(data)
        if "id" not in row:
            row["id"] = f"gen-{self._next_id}"
            self._next_id += 1
        rows.append(row)
        return dict(row)

    async def update(self, table, data, filters, use_admin=False, token=None):
        if table in self.failing_writes:
            return None
        updated = []
        for row in self.tables.get(table, []):
            if _matches(row, filters):
                row.update(data)
                updated.append(dict(row))
        return updated

    async def delete(self, table, filters, use_admin=False, token=None):
        if table in self.failing_writes:
            return False
        rows = self.tables.get(table, [])
        self.tables[table] = [r for r in rows if not _matches(r, filters)]
        return True

    async def rpc(self, function_name, params=None, use_admin=False, token=None):
        self.rpc_calls.append((function_name, params or {}, token))
        if function_name in self.failing_rpcs:
            return False, None
        return True, None

    async def sign_out(self, token):
        await asyncio.sleep(self.sign_out_delay)
        self.signed_out.append(token)
        return True

    async def close(self):
        pass


def make_video(video_id: str, **fields) -> dict:
    """A raw videos row with sensible defaults."""
    row = {
        "id": video_id,
        "title": f"Video {video_id}",
        "description": "",
        "video_url": f"https://cdn.example/{video_id}.mp4",
        "thumbnail_url": f"https://cdn.example/{video_id}.jpg",
        "status": "approved",
        "created_at": "2024-01-01T00:00:00Z",
        "view_count": 0,
        "ads_enabled": True,
        "is_featured": None,
    }
    row.update(fields)
    return row


@pytest.fixture
def fake_db(monkeypatch):
    """Install an empty FakeSupabase as the global REST client."""
    db = FakeSupabase()
    monkeypatch.setattr(supabase_rest_client, "_client", db)
    return db
