"""
伪名设备认证流程入口点

该脚本初始化系统参数并运行一次完整的注册、假名、证书与验证流程。
"""
import sys

from pymauth.config import AuthConfig
from pymauth.simulation import run_benchmark

if __name__ == "__main__":
    config = AuthConfig()

    # 任一关卡失败时以状态码 1 退出。
    reports = run_benchmark(config)
    sys.exit(0 if all(r.succeeded for r in reports) else 1)
