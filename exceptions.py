#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Custom exceptions for the checkout order server."""


class OrderServiceError(Exception):
  """Base class for all order server exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class ResourceNotFoundError(OrderServiceError):
  """Raised when a requested resource is not found."""

  def __init__(self, message: str):
    super().__init__(message, code="RESOURCE_NOT_FOUND", status_code=404)


class InvalidRequestError(OrderServiceError):
  """Raised when the request is invalid (e.g. missing fields)."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_REQUEST", status_code=400)


class InvalidStateError(OrderServiceError):
  """Raised when an order is not in a state that allows the transition."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_STATE", status_code=400)


class InvalidSignatureError(OrderServiceError):
  """Raised when a webhook payload fails signature verification."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_SIGNATURE", status_code=400)


class PaymentProviderError(OrderServiceError):
  """Raised when a call to the payment processor fails."""

  def __init__(self, message: str):
    super().__init__(message, code="PAYMENT_PROVIDER_ERROR", status_code=500)


class StorageUnavailableError(OrderServiceError):
  """Raised when the order store cannot be read or written."""

  def __init__(self, message: str):
    super().__init__(message, code="STORAGE_UNAVAILABLE", status_code=500)


class ConfigurationError(OrderServiceError):
  """Raised when a required secret or setting is missing."""

  def __init__(self, message: str):
    super().__init__(message, code="CONFIGURATION_ERROR", status_code=500)
