"""
Bangumi 分集识别

根据分集文件名、媒体库已有信息和 Bangumi 分集列表，确定文件对应的分集与季内位置。
"""

__version__ = "1.0.0"
