"""
概率模型：把未完成 Todo 的 priority 转成归一化的抽取概率

权重 = 1 / priority（priority 越小越紧急，权重越大），
概率 = 权重 / 总权重，输出顺序与输入一致，概率之和为 1。
"""

from collections.abc import Sequence

from nextup.todo.schemas import TodoRead


class InvalidArgumentError(ValueError):
    """概率模型 / 抽签器的调用方传入了非法参数（属于编程错误）"""


def weight_of(item: TodoRead) -> float:
    """单条权重：1 / priority，priority 必须 >= 1"""
    if item.priority < 1:
        raise InvalidArgumentError(f"priority 必须 >= 1，实际为 {item.priority}")
    return 1.0 / item.priority


def compute_distribution(items: Sequence[TodoRead]) -> list[tuple[TodoRead, float]]:
    """
    计算抽取分布。

    Args:
        items: 非空的未完成 Todo 序列（调用方保证非空）

    Returns:
        [(todo, probability), ...]，顺序同输入
    """
    if not items:
        raise InvalidArgumentError("无法对空列表计算概率分布")

    weights = [weight_of(item) for item in items]
    total_weight = sum(weights)
    return [(item, weight / total_weight) for item, weight in zip(items, weights)]
