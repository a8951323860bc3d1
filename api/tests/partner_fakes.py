"""Stand-ins for the partner HTTP API, built on unittest.mock."""
from unittest.mock import Mock

import requests


def pay_item(external_id, employee_id="abcdedfg", pay_rate=12.5, hours=8.5, date="2021-10-19"):
    return {
        "id": external_id,
        "employeeId": employee_id,
        "payRate": pay_rate,
        "hoursWorked": hours,
        "date": date,
    }


def page(items, is_last_page=True):
    return {"payItems": list(items), "isLastPage": is_last_page}


def response(status_code=200, body=None):
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    if body is None:
        resp.json.side_effect = requests.JSONDecodeError("Expecting value", "", 0)
    else:
        resp.json.return_value = body
    return resp


def partner(*responses):
    """A requests-compatible ``get`` that serves ``responses[page - 1]``."""
    http = Mock(spec=requests.Session)

    def _get(url, params=None, headers=None, timeout=None):
        return responses[params["page"] - 1]

    http.get.side_effect = _get
    return http


def single_page(*items):
    return partner(response(200, page(items)))
