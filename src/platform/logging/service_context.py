"""
Service context extraction for log correlation.

Server replicas and check-in devices write to the same log pipeline, so every
line carries `service@env:instance` to tell them apart.
"""

import os
import socket
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'redemption')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Check-in devices identify themselves explicitly; servers fall back to host + pid
    instance = os.getenv('DEVICE_ID', '')
    if not instance:
        try:
            host = socket.gethostname().split('.')[0][:12]
        except OSError:
            host = 'host'
        instance = f'{host}-{os.getpid()}'

    return f'{service_name}@{deploy_env}:{instance}'
