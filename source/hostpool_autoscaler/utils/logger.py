# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import logging.handlers
from typing import Optional
import os
import inspect

_PACKAGE_NAME = "hostpool_autoscaler"


class PathTruncatingFormatter(logging.Formatter):
    def format(self, record):
        # custom_pathname return anything after .../hostpool_autoscaler/
        _truncate_after = f"{os.sep}{_PACKAGE_NAME}{os.sep}"
        start_pos = record.pathname.find(_truncate_after)
        if start_pos == -1:
            record.custom_pathname = os.path.basename(record.pathname)
        else:
            record.custom_pathname = record.pathname[start_pos + 1 :]

        # Traverse the call stack to get the call chain
        call_chain = []
        for frame_info in inspect.stack():
            filename = frame_info.filename
            # Only track package files, and drop Python libs and logger.py
            if _truncate_after in filename and "utils/logger.py" not in filename:
                truncated_path = filename[filename.find(_truncate_after) + 1 :]
                call_chain.append(f"{truncated_path}:{frame_info.function}")

        record.call_chain = " > ".join(call_chain[::-1])

        return super(PathTruncatingFormatter, self).format(record)


class HostpoolLogger:
    def __init__(
        self,
        name: str = "hostpool_logger",
        level: Optional[int] = None,
        formatter: Optional[str] = None,
    ):
        """
        Constructor for HostpoolLogger.

        Parameters:
        name (str): Name of the logger. All modules log through hostpool_logger
        level (int / logging.Level): Minimum logging level to be captured, default to INFO, enable debug via export HOSTPOOL_DEBUG=1
        formatter (str): Optional: Enforce a customized formatter
        """
        self._logger = logging.getLogger(name)
        _debug = str(os.environ.get("HOSTPOOL_DEBUG", "0")).lower() in [
            "true",
            "on",
            "1",
            "yes",
            "enabled",
        ]

        if level is None:
            self._level = logging.DEBUG if _debug else logging.INFO
        else:
            self._level = level

        self._logger.setLevel(self._level)
        if not formatter:
            if _debug or self._level == logging.DEBUG:
                _format = "[%(asctime)s] [%(levelname)s] [%(lineno)d] [%(custom_pathname)s] [%(call_chain)s] [%(funcName)s] [%(message)s]"
            else:
                # call_chain is left empty when debug is disabled to avoid un-necessary text.
                _format = "[%(asctime)s] [%(levelname)s] [%(lineno)d] [%(custom_pathname)s] [] [%(funcName)s] [%(message)s]"
            self._formatter = PathTruncatingFormatter(_format)
        else:
            self._formatter = logging.Formatter(formatter)

    def _add_handler(self, handler: logging.Handler):
        handler.setLevel(self._level)
        handler.setFormatter(self._formatter)
        self._logger.addHandler(handler)
        return self.get_logger()

    def rotating_file_handler(
        self, file_path: str, max_bytes: int = 1024 * 1024 * 5, backup_count: int = 5
    ):
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        return self._add_handler(
            logging.handlers.RotatingFileHandler(
                file_path, maxBytes=max_bytes, backupCount=backup_count
            )
        )

    def get_logger(self):
        return self._logger
