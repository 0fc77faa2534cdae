"""
加权抽签：逆 CDF 采样

按输入顺序累加概率，返回第一个累计值 >= random_unit 的条目。
随机数由调用方注入（[0, 1) 均匀分布），本模块不触碰全局随机状态。
"""

from collections.abc import Sequence

from nextup.recommend.probability import InvalidArgumentError
from nextup.todo.schemas import TodoRead


def select_weighted(
    distribution: Sequence[tuple[TodoRead, float]], random_unit: float
) -> TodoRead:
    """
    从分布中选出一个条目。

    random_unit 恰为 1.0，或浮点误差导致最终累计值略小于 random_unit 时，
    回落到最后一个条目，保证总能选出结果。
    """
    if not distribution:
        raise InvalidArgumentError("无法从空分布中抽取")

    cumulative = 0.0
    for item, probability in distribution:
        cumulative += probability
        if cumulative >= random_unit:
            return item

    # 浮点兜底
    return distribution[-1][0]
