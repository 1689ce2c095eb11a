# src/decision/backend_llamacpp.py

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from llama_cpp import Llama

from env.schema import DecisionConfig


class LlamaCppDecisionBackend:
    """DecisionBackend implementation using llama.cpp local inference.

    Built from the `decision` section of agent.yaml:
      - model_path
      - context_length
      - gpu_layers (optional; default offloads all layers)
      - max_tokens / temperature
    """

    def __init__(self, config: DecisionConfig, *, llm: Optional[Any] = None) -> None:
        self._cfg = config

        if llm is not None:
            # Pre-built model object (tests, shared models).
            self._llm = llm
            return

        if not config.model_path:
            raise ValueError("LlamaCppDecisionBackend requires decision.model_path")
        path = Path(config.model_path)
        if not path.exists():
            raise FileNotFoundError(path)

        # If gpu_layers is not set, offload all layers and let llama.cpp
        # place as many as VRAM allows.
        gpu_layers = 9999 if config.gpu_layers is None else config.gpu_layers

        self._llm = Llama(
            model_path=str(path),
            n_ctx=config.context_length,
            n_gpu_layers=gpu_layers,
            n_threads=max(1, (os.cpu_count() or 1) - 1),
            verbose=False,
        )

    def decide(self, prompt: str, *, system_prompt: Optional[str] = None) -> str:
        """
        Ask the model for a decision using a chat-completion call.

        system_prompt -> system message (if provided)
        prompt        -> user message
        """
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        out = self._llm.create_chat_completion(
            messages=messages,
            max_tokens=self._cfg.max_tokens,
            temperature=self._cfg.temperature,
        )

        # OpenAI-style shape: choices[0]["message"]["content"]
        text = out["choices"][0]["message"]["content"] or ""
        return text.strip()
