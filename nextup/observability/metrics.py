"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "nextup_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "nextup_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 2500],
)

# ── 推荐引擎指标 ──

RECOMMEND_TOTAL = Counter(
    "nextup_recommend_total",
    "推荐请求总数",
    ["outcome"],  # outcome: pinned/rolled/empty
)

PIN_CONFLICT_TOTAL = Counter(
    "nextup_pin_conflict_total",
    "置顶条件写入冲突次数",
)
