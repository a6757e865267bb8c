"""samurai - 原生 C/C++ 依赖拉取与构建编排工具"""

__version__ = "0.3.0"
