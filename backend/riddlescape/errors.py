"""Error taxonomy shared by services, HTTP routes and socket handlers.

Services raise these; the ``escape`` blueprint turns them into
``{success: false, message}`` JSON responses with the matching status.
"""

from typing import Optional


class EscapeError(Exception):
    status_code = 400
    default_message = 'Request could not be processed.'

    def __init__(self, message: Optional[str] = None, redirect: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.redirect = redirect

    def to_dict(self):
        payload = {'success': False, 'message': self.message}
        if self.redirect:
            payload['redirect'] = self.redirect
        return payload


class ValidationError(EscapeError):
    status_code = 400
    default_message = 'Invalid input.'


class NotFoundError(EscapeError):
    status_code = 404
    default_message = 'Not found.'


class InvalidAccessCode(NotFoundError):
    # The browser shows this one inline as "invalid code"
    status_code = 401
    default_message = 'Invalid Access Code.'


class UnknownPuzzleError(NotFoundError):
    default_message = 'Unknown puzzle.'


class NoActiveSessionError(EscapeError):
    status_code = 403
    default_message = 'Enter your name on the home screen to start.'

    def __init__(self, message: Optional[str] = None, redirect: Optional[str] = '/'):
        super().__init__(message, redirect)


class SessionEndedError(EscapeError):
    status_code = 409
    default_message = 'This run has ended.'

    def __init__(self, message: Optional[str] = None, redirect: Optional[str] = '/'):
        super().__init__(message, redirect)


class SessionInProgressError(EscapeError):
    status_code = 409
    default_message = 'Finish the run before submitting a score.'
