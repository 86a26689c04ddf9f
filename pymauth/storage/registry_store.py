import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional


class CommitmentStore(ABC):
    """
    外部注册表存储接口：身份 -> 注册承诺摘要。

    持久化实现（数据库等）由部署方提供；本项目只附带内存实现。
    """

    @abstractmethod
    def put(self, identity: bytes, digest: bytes) -> bool:
        """保存承诺；身份已存在时返回 False 且不覆盖。"""

    @abstractmethod
    def get(self, identity: bytes) -> Optional[bytes]:
        """返回身份对应的承诺摘要，不存在时返回 None。"""

    @abstractmethod
    def remove(self, identity: bytes) -> bool:
        """删除身份的承诺，返回是否存在过。"""

    def __contains__(self, identity: bytes) -> bool:
        return self.get(identity) is not None


class InMemoryCommitmentStore(CommitmentStore):
    """线程安全的内存存储。"""

    def __init__(self):
        self._commitments: Dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def put(self, identity: bytes, digest: bytes) -> bool:
        with self._lock:
            if identity in self._commitments:
                return False
            self._commitments[identity] = digest
            return True

    def get(self, identity: bytes) -> Optional[bytes]:
        with self._lock:
            return self._commitments.get(identity)

    def remove(self, identity: bytes) -> bool:
        with self._lock:
            return self._commitments.pop(identity, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._commitments)
