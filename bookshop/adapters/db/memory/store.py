import threading

from pydantic import BaseModel

TABLES = (
    "users",
    "categories",
    "products",
    "reviews",
    "carts",
    "cart_items",
    "orders",
    "order_items",
)


# インメモリのエンティティストア。
# テーブルごとに {id: エンティティ} を持ち、ID はテーブルごとに 1 から採番する。
# 格納済みのエンティティはその場で書き換えず、更新時は差し替える。
# ロールバック用のテーブルのコピーは unit of work が書き込み時に取る
class InMemoryStore:
    def __init__(self):
        self.tables: dict[str, dict[int, BaseModel]] = {name: {} for name in TABLES}
        self._last_ids: dict[str, int] = {name: 0 for name in TABLES}
        self.lock = threading.RLock()

    # ロールバックしても巻き戻さない (ID は再利用しない)
    def next_id(self, table: str) -> int:
        self._last_ids[table] += 1
        return self._last_ids[table]

