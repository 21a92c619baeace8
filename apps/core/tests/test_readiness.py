"""Tests for the database readiness gate and its middleware."""

from __future__ import annotations

from unittest import mock

from django.db import OperationalError  # type: ignore
from django.test import TestCase  # type: ignore
from django.urls import reverse  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.test import APIClient  # type: ignore

from apps.core.readiness import DatabaseGate, database_gate


def _broken_connection() -> mock.MagicMock:
    broken = mock.MagicMock()
    broken.ensure_connection.side_effect = OperationalError("connection refused")
    return broken


class DatabaseGateTests(TestCase):
    def test_initialize_marks_gate_ready(self) -> None:
        gate = DatabaseGate()

        self.assertEqual(gate.initialize(), DatabaseGate.READY)
        self.assertTrue(gate.is_ready)
        self.assertIsNone(gate.last_error)

    def test_failed_connection_is_recorded(self) -> None:
        gate = DatabaseGate()

        with mock.patch("apps.core.readiness.connection", _broken_connection()):
            state = gate.initialize()

        self.assertEqual(state, DatabaseGate.FAILED)
        self.assertFalse(gate.is_ready)
        self.assertIn("connection refused", gate.last_error)

    def test_failed_gate_recovers_on_next_attempt(self) -> None:
        gate = DatabaseGate()
        with mock.patch("apps.core.readiness.connection", _broken_connection()):
            gate.initialize()

        self.assertEqual(gate.initialize(), DatabaseGate.READY)


class ReadinessMiddlewareTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        database_gate.reset()

    def tearDown(self) -> None:
        database_gate.reset()

    def test_api_is_refused_while_database_is_down(self) -> None:
        with mock.patch("apps.core.readiness.connection", _broken_connection()):
            response = self.client.get(reverse("club-list"))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(database_gate.state, DatabaseGate.FAILED)

    def test_health_reports_unavailable_database(self) -> None:
        with mock.patch("apps.core.readiness.connection", _broken_connection()):
            response = self.client.get(reverse("health"))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()["database"], DatabaseGate.FAILED)

    def test_health_reports_ready_database(self) -> None:
        response = self.client.get(reverse("health"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "ok")
        self.assertTrue(database_gate.is_ready)
