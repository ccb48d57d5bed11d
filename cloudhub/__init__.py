"""CloudHub: 클라우드 리소스 대시보드 백엔드."""

__version__ = "0.1.0"
