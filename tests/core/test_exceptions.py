from http import HTTPStatus

import pytest

from zipper.core import exceptions


class TestExceptionCodes:

    @pytest.mark.parametrize('exception_class', [
        exceptions.StoreUnavailable,
        exceptions.TokenNotFound,
        exceptions.MalformedManifest,
    ])
    def test_resolution_errors_look_alike(self, exception_class):
        exc = exception_class('tok', log_message='the real reason')
        assert isinstance(exc, exceptions.ResolutionError)
        assert exc.code == HTTPStatus.UNAUTHORIZED
        assert exc.message == 'Unauthorized'
        assert 'the real reason' not in str(exc)

    def test_invalid_parameters(self):
        exc = exceptions.InvalidParameters('Missing or empty token')
        assert exc.code == HTTPStatus.BAD_REQUEST
        assert exc.is_user_error

    def test_fetch_errors(self):
        not_found = exceptions.NotFound('obj/a')
        failed = exceptions.FetchFailed('obj/b', log_message='AccessDenied')

        assert isinstance(not_found, exceptions.FetchError)
        assert isinstance(failed, exceptions.FetchError)
        assert not_found.code == HTTPStatus.NOT_FOUND
        assert failed.storage_path == 'obj/b'
        assert failed.log_message == 'AccessDenied'

    def test_repr(self):
        exc = exceptions.InvalidParameters('No query parameters')
        assert repr(exc) == '<InvalidParameters(400, No query parameters)>'
        assert str(exc) == '400, No query parameters'
