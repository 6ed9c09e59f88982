"""
Core package: 数据库、配置、调度规则与拼音工具
"""
