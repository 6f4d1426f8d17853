# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import logging
import unittest
from unittest.mock import patch

import main
from career_canvas.config import Settings


class TestMain(unittest.TestCase):

    @patch("main.configure_logging")
    @patch("main.uvicorn.run")
    @patch("main.get_settings")
    def test_runs_app_on_configured_port(self, mock_settings, mock_run, mock_logging):
        mock_settings.return_value = Settings(
            port=4100, node_env="development", website_instance_id=None
        )

        self.assertEqual(main.main(), 0)

        mock_run.assert_called_once_with(main.app, host="0.0.0.0", port=4100)
        mock_logging.assert_called_once_with(False)

    @patch("main.configure_logging")
    @patch("main.uvicorn.run")
    @patch("main.get_settings")
    def test_azure_instance_counts_as_production(
        self, mock_settings, mock_run, mock_logging
    ):
        mock_settings.return_value = Settings(
            node_env="development", website_instance_id="abc123"
        )

        main.main()

        mock_logging.assert_called_once_with(True)

    @patch("main.logging.basicConfig")
    def test_configure_logging_levels(self, mock_basic_config):
        main.configure_logging(True)
        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.INFO)

        main.configure_logging(False)
        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
