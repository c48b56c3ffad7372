"""Error kinds raised by the cart service."""


class CartError(LookupError):
	"""Base class; `status_code` is the HTTP status the API answers with."""

	status_code = 400

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def __str__(self) -> str:
		return self.message


class ProductNotFoundError(CartError):
	status_code = 404


class InvalidProductError(CartError):
	status_code = 400


class InvalidOptionError(CartError):
	status_code = 400


class SessionNotFoundError(CartError):
	status_code = 404


class ItemNotFoundError(CartError):
	status_code = 404
