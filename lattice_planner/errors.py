# lattice_planner/errors.py
from enum import Enum


class FailureCode(Enum):
    # 启动期致命错误：primitive 表缺失/损坏/分辨率不匹配
    CONFIG_ERROR = "CONFIG_ERROR"

    # 请求级错误：起终点越界或处于碰撞中
    INVALID_INPUT = "INVALID_INPUT"

    # 搜索空间耗尽
    NO_PATH_FOUND = "NO_PATH_FOUND"

    # 时间预算耗尽且没有任何解
    TIMEOUT = "TIMEOUT"


class PlannerError(Exception):
    """所有规划相关异常的基类"""
    code = FailureCode.CONFIG_ERROR


class ConfigError(PlannerError):
    """配置不可用。规划器不允许带着它启动。"""
    code = FailureCode.CONFIG_ERROR


class PrimitiveTableError(ConfigError):
    """primitive 表缺失、损坏或与车辆模型不匹配"""

    def __init__(self, message: str, path=None, line_no: int = None):
        self.path = path
        self.line_no = line_no
        where = ""
        if path is not None:
            where = f"{path}"
            if line_no is not None:
                where += f":{line_no}"
            where += ": "
        super().__init__(where + message)


class InvalidInputError(PlannerError):
    """请求本身不合法，调用者可以修正后重试"""
    code = FailureCode.INVALID_INPUT


class MapFormatError(PlannerError):
    """地图文件无法解析"""
    code = FailureCode.INVALID_INPUT
