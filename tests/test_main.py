from __future__ import annotations

import main


def test_launcher_serves_app_without_reload(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    main.main()

    assert len(calls) == 1
    target, kwargs = calls[0]
    assert target == "app:app"
    assert kwargs["reload"] is False
    assert kwargs["host"] == main.HOST
    assert kwargs["port"] == main.PORT
