"""Тесты для response_processing модуля."""

import base64
import json

import httpx
import pytest

from robloxapi.exceptions import (
    BadRequest,
    ChallengeRequired,
    InternalServerError,
    MalformedResponse,
    NotFound,
    RoblosecurityExpired,
    TooManyRequests,
    UnknownRobloxErrorCode,
    UnknownStatus403Format,
    UnknownStatusCode,
    UserDoesNotOwnAsset,
    XcsrfNotReturned,
    XcsrfTokenRejected,
)
from robloxapi.models import CountResponse
from robloxapi.response_processing import (
    CHALLENGE_METADATA_HEADER,
    CHALLENGE_REQUIRED_MESSAGE,
    NOT_FOUND_STATUS_ERRORS,
    map_error_status,
    parse_bytes,
    parse_json,
    parse_model,
    process_400,
    process_401,
    process_403,
    run_parser,
)
from robloxapi.token_manager import XCSRF_HEADER

# Маркируем все тесты в этом модуле как unit-тесты
pytestmark = pytest.mark.unit


def error_body(code: int, message: str = "") -> dict:
    return {"errors": [{"code": code, "message": message}]}


def encode_metadata(metadata: dict) -> str:
    return base64.b64encode(json.dumps(metadata).encode()).decode()


class TestProcess403:
    """Тесты классификации 403."""

    def test_token_rejected_with_code_0(self) -> None:
        """Код 0 и новый токен — XcsrfTokenRejected с этим токеном."""
        response = httpx.Response(
            403, json=error_body(0, "Token Validation Failed"), headers={XCSRF_HEADER: "new"}
        )

        error = process_403(response)

        assert isinstance(error, XcsrfTokenRejected)
        assert error.token == "new"

    def test_code_0_without_token(self) -> None:
        """Код 0 без токена — XcsrfNotReturned."""
        response = httpx.Response(403, json=error_body(0, "Token Validation Failed"))

        assert isinstance(process_403(response), XcsrfNotReturned)

    def test_unparseable_body_with_token(self) -> None:
        """Неразборчивое тело и новый токен — XcsrfTokenRejected."""
        response = httpx.Response(403, content=b"Forbidden", headers={XCSRF_HEADER: "new"})

        assert isinstance(process_403(response), XcsrfTokenRejected)

    def test_unparseable_body_without_token(self) -> None:
        """Неразборчивое тело без токена — XcsrfNotReturned."""
        response = httpx.Response(403, content=b"Forbidden")

        assert isinstance(process_403(response), XcsrfNotReturned)

    def test_empty_errors_with_token(self) -> None:
        """Пустой список ошибок и новый токен — XcsrfTokenRejected."""
        response = httpx.Response(403, json={"errors": []}, headers={XCSRF_HEADER: "new"})

        assert isinstance(process_403(response), XcsrfTokenRejected)

    def test_empty_errors_without_token(self) -> None:
        """Пустой список ошибок без токена — UnknownStatus403Format."""
        response = httpx.Response(403, json={"errors": []})

        assert isinstance(process_403(response), UnknownStatus403Format)

    def test_user_does_not_own_asset(self) -> None:
        """Код 9 — UserDoesNotOwnAsset, даже при наличии токена."""
        response = httpx.Response(
            403, json=error_body(9, "The user does not own the asset"), headers={XCSRF_HEADER: "new"}
        )

        assert isinstance(process_403(response), UserDoesNotOwnAsset)

    def test_unknown_error_code(self) -> None:
        """Прочие коды — UnknownRobloxErrorCode с кодом и сообщением."""
        response = httpx.Response(403, json=error_body(7, "Something else"))

        error = process_403(response)

        assert isinstance(error, UnknownRobloxErrorCode)
        assert error.code == 7
        assert error.roblox_message == "Something else"

    def test_challenge_required(self) -> None:
        """Челлендж — ChallengeRequired с id из метаданных."""
        response = httpx.Response(
            403,
            json=error_body(1, CHALLENGE_REQUIRED_MESSAGE),
            headers={
                CHALLENGE_METADATA_HEADER: encode_metadata(
                    {"userId": "1", "challengeId": "abc-123", "shouldShowRememberDeviceCheckbox": False}
                )
            },
        )

        error = process_403(response)

        assert isinstance(error, ChallengeRequired)
        assert error.challenge_id == "abc-123"

    def test_challenge_without_metadata(self) -> None:
        """Челлендж без метаданных — UnknownStatus403Format."""
        response = httpx.Response(403, json=error_body(1, CHALLENGE_REQUIRED_MESSAGE))

        assert isinstance(process_403(response), UnknownStatus403Format)

    def test_challenge_with_broken_metadata(self) -> None:
        """Нераскодируемые метаданные — UnknownStatus403Format."""
        response = httpx.Response(
            403,
            json=error_body(1, CHALLENGE_REQUIRED_MESSAGE),
            headers={CHALLENGE_METADATA_HEADER: "%%%not-base64%%%"},
        )

        assert isinstance(process_403(response), UnknownStatus403Format)


class TestProcess400And401:
    """Тесты 400 и 401."""

    def test_400_plain(self) -> None:
        """400 без тела — BadRequest."""
        assert isinstance(process_400(httpx.Response(400)), BadRequest)

    def test_400_with_embedded_error(self) -> None:
        """400 с ошибкой в теле — UnknownRobloxErrorCode."""
        error = process_400(httpx.Response(400, json=error_body(3, "Invalid price")))

        assert isinstance(error, UnknownRobloxErrorCode)
        assert error.code == 3

    def test_401_plain(self) -> None:
        """401 — RoblosecurityExpired."""
        error = process_401(httpx.Response(401, json=error_body(0, "Authorization has been denied")))

        assert isinstance(error, RoblosecurityExpired)

    def test_401_with_nonzero_code(self) -> None:
        """401 с ненулевым кодом — UnknownRobloxErrorCode."""
        error = process_401(httpx.Response(401, json=error_body(5, "Other")))

        assert isinstance(error, UnknownRobloxErrorCode)


class TestMapErrorStatus:
    """Тесты выбора исключения по таблице статусов."""

    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (400, BadRequest),
            (401, RoblosecurityExpired),
            (429, TooManyRequests),
            (500, InternalServerError),
        ],
    )
    def test_standard_table(self, status: int, error: type) -> None:
        """Стандартная таблица покрывает 400, 401, 429, 500."""
        assert isinstance(map_error_status(httpx.Response(status)), error)

    def test_403_is_classified_before_table(self) -> None:
        """403 классифицируется отдельно, даже если он есть в таблице."""
        table = {403: lambda response: TooManyRequests()}
        response = httpx.Response(403, json=error_body(9))

        assert isinstance(map_error_status(response, table), UserDoesNotOwnAsset)

    def test_unknown_status(self) -> None:
        """Код вне таблицы — UnknownStatusCode."""
        error = map_error_status(httpx.Response(502))

        assert isinstance(error, UnknownStatusCode)
        assert error.status_code == 502

    def test_endpoint_table_extends_standard(self) -> None:
        """Таблица эндпоинта без 429 не отменяет стандартную обработку 429."""
        error = map_error_status(httpx.Response(429), NOT_FOUND_STATUS_ERRORS)

        assert isinstance(error, TooManyRequests)

    def test_endpoint_table_adds_codes(self) -> None:
        error = map_error_status(httpx.Response(404), NOT_FOUND_STATUS_ERRORS)

        assert isinstance(error, NotFound)

    def test_404_without_endpoint_table(self) -> None:
        """Без таблицы эндпоинта 404 неизвестен."""
        assert isinstance(map_error_status(httpx.Response(404)), UnknownStatusCode)


class TestParsers:
    """Тесты парсеров успешных ответов."""

    def test_parse_model(self) -> None:
        result = run_parser(parse_model(CountResponse), httpx.Response(200, json={"count": 2}))

        assert result == CountResponse(count=2)

    def test_parse_model_list(self) -> None:
        """parse_model принимает и составные типы."""
        response = httpx.Response(200, json=[{"count": 1}, {"count": 2}])

        result = run_parser(parse_model(list[CountResponse]), response)

        assert [item.count for item in result] == [1, 2]

    def test_wrong_type_is_malformed(self) -> None:
        """Поле неверного типа — MalformedResponse."""
        response = httpx.Response(200, json={"count": "many"})

        with pytest.raises(MalformedResponse) as exc_info:
            run_parser(parse_model(CountResponse), response)
        assert exc_info.value.original_error is not None

    def test_parse_json_invalid(self) -> None:
        """Невалидный JSON — MalformedResponse."""
        with pytest.raises(MalformedResponse):
            run_parser(parse_json, httpx.Response(200, content=b"{"))

    def test_key_error_is_malformed(self) -> None:
        """KeyError в парсере тоже становится MalformedResponse."""
        with pytest.raises(MalformedResponse):
            run_parser(lambda response: response.json()["missing"], httpx.Response(200, json={}))

    def test_parse_bytes(self) -> None:
        assert run_parser(parse_bytes, httpx.Response(200, content=b"\x00\x01")) == b"\x00\x01"
