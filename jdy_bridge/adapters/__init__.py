"""Adapter layer package for the JianDaoYun remote API boundary."""

from .interfaces import JianDaoYunAdapterPort, RecordCreateRequest, RecordQueryRequest
from .jdy_error_codes import JDY_FORM_NOT_EXIST_MESSAGE, JdyErrorCode, jdy_error_suggestion
from .jdy_errors import (
	JdyAdapterConnectionError,
	JdyAdapterError,
	JdyAdapterTimeoutError,
	JdyApiError,
	JdyResponseContractError,
)
from .jdy_web_service import JianDaoYunWebServiceAdapter

__all__ = [
	"JDY_FORM_NOT_EXIST_MESSAGE",
	"JdyAdapterConnectionError",
	"JdyAdapterError",
	"JdyAdapterTimeoutError",
	"JdyApiError",
	"JdyErrorCode",
	"JdyResponseContractError",
	"JianDaoYunAdapterPort",
	"JianDaoYunWebServiceAdapter",
	"RecordCreateRequest",
	"RecordQueryRequest",
	"jdy_error_suggestion",
]
