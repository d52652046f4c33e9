"""Pulumi entry point for LobeChat infrastructure."""
import logging

import structlog

from lobechat_infra.__main__ import LobechatStack
from lobechat_infra.config import StackConfig

structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
LobechatStack(config=StackConfig.load()).run()
