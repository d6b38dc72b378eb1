"""
Cluster Hibernator

워커 풀을 존당 1개로 줄여 두었다가 원래 크기로 되돌리는 백엔드.
"""

__version__ = "1.0.0"
