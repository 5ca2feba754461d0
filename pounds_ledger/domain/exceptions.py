"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


# Validation


class ValidationError(DomainException):
    """Request data is missing or out of range"""

    pass


class InsufficientBalanceError(ValidationError):
    """Withdrawal amount exceeds the available balance"""

    pass


class PinNotSetError(ValidationError):
    """Account has no transaction PIN; PIN setup is required first"""

    pass


# Authorization


class AuthorizationError(DomainException):
    """Transaction PIN did not match"""

    pass


# Lookup / conflicts


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    pass


class AccountNotFoundError(NotFoundError):
    pass


class BankAccountNotFoundError(NotFoundError):
    pass


class DuplicateAccountError(DomainException):
    """Account already exists for this user id"""

    pass


class DuplicateBankAccountError(DomainException):
    """Bank account with the same bank code and account number is already saved"""

    pass


class PaymentNotVerifiedError(DomainException):
    """Payment gateway reported the payment as unsuccessful"""

    pass


# Remote failures


class RemoteFailure(DomainException):
    """A remote collaborator (store or gateway) failed or was unavailable"""

    pass


class PaymentGatewayError(RemoteFailure):
    """Payment verification API returned an error or is unavailable"""

    pass


class BankResolutionError(RemoteFailure):
    """Bank account name resolution failed"""

    pass


class StoreError(RemoteFailure):
    """Account record store write failed"""

    pass


class StaleAccountError(StoreError):
    """Account kept changing underneath us; retries exhausted"""

    pass
