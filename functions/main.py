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

# Server entry point for the Career Canvas API.
#
# Locally this runs with debug logging; on Azure App Service (or with
# NODE_ENV=production) it logs at INFO.

import logging

import uvicorn

from career_canvas.app import app
from career_canvas.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(production: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if production else logging.DEBUG,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )


def main() -> int:
    settings = get_settings()
    configure_logging(settings.is_production)
    if settings.is_production:
        logger.info("Running in production mode")
    else:
        logger.info("Running in local development mode")
    logger.info("API: http://localhost:%d%s", settings.port, settings.api_prefix)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
