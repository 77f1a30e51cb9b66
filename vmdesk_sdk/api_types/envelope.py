#!/usr/bin/env python3
"""
Action envelope models for the management server JSON endpoint.

Request:  {"action": "<resource>.<verb>", "data": {...}}
Response: {"code": <int>, "msg": "<string>", "data": <any>}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionRequest(BaseModel):
    """One call to the remote action endpoint"""
    action: str = Field(..., description="Action identifier, e.g. vm.start")
    data: Dict[str, Any] = Field(default_factory=dict, description="Named payload fields")


class ActionResponse(BaseModel):
    """Envelope returned by the remote action endpoint"""
    model_config = ConfigDict(extra="ignore")

    code: int = Field(..., description="0 on success, peer error code otherwise")
    msg: Optional[str] = Field(default="", description="Peer-supplied message")
    data: Any = Field(default=None, description="Operation result")

    @property
    def ok(self) -> bool:
        return self.code == 0
