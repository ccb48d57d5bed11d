# cloudhub/utils/serializers.py
from datetime import datetime
from typing import Any, Dict, Optional

from cloudhub.database import models


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """저장된 naive UTC 시각을 ISO-8601 문자열('Z' 접미사)로 변환합니다."""
    if value is None:
        return None
    return value.isoformat() + "Z"


def user_to_dict(user: models.User) -> Dict[str, Any]:
    """사용자 정보를 응답용 딕셔너리로 변환합니다. 비밀번호 해시는 포함하지 않습니다."""
    return {
        "id": user.id,
        "username": user.username,
        "displayName": user.display_name,
        "avatar": user.avatar,
        "role": user.role,
    }


def project_to_dict(project: models.Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "status": project.status,
        "createdAt": isoformat(project.created_at),
        "lastDeployed": isoformat(project.last_deployed),
        "costPerMonth": project.cost_per_month,
        "userId": project.user_id,
    }


def service_to_dict(service: models.Service) -> Dict[str, Any]:
    return {
        "id": service.id,
        "name": service.name,
        "type": service.type,
        "status": service.status,
        "projectId": service.project_id,
        "config": service.config,
        "createdAt": isoformat(service.created_at),
    }


def usage_to_dict(usage: models.ResourceUsage) -> Dict[str, Any]:
    return {
        "id": usage.id,
        "serviceId": usage.service_id,
        "cpuUsage": usage.cpu_usage,
        "memoryUsage": usage.memory_usage,
        "storageUsage": usage.storage_usage,
        "networkUsage": usage.network_usage,
        "timestamp": isoformat(usage.timestamp),
    }


def activity_to_dict(activity: models.Activity) -> Dict[str, Any]:
    return {
        "id": activity.id,
        "type": activity.type,
        "message": activity.message,
        "userId": activity.user_id,
        "projectId": activity.project_id,
        "serviceId": activity.service_id,
        "timestamp": isoformat(activity.timestamp),
    }


def health_to_dict(status: models.ServiceHealthStatus) -> Dict[str, Any]:
    return {
        "id": status.id,
        "serviceType": status.service_type,
        "status": status.status,
        "uptime": status.uptime,
        "lastUpdated": isoformat(status.last_updated),
    }
