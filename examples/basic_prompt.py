#!/usr/bin/env python3
"""
Basic prompt rendering example using prompt-dialects.

Renders the system step and each user turn separately, the way a chat
front-end accumulates its prompt between model replies.
"""

from prompt_dialects import INITIAL, PromptFormat, PromptFormatter, Turn


def main():
    formatter = PromptFormatter(
        PromptFormat.LLAMA_INSTRUCT,
        system="You are a helpful assistant.",
        bos_token="<s>",
    )

    prompt = formatter.render(INITIAL)
    replies = ["Paris.", "About 2.1 million people."]
    questions = ["What is the capital of France?", "How many people live there?"]

    for index, question in enumerate(questions):
        prompt += formatter.render(Turn(text=question, index=index))
        # A real front-end would submit `prompt` here and append the model output.
        prompt += replies[index]

    print(prompt)


if __name__ == "__main__":
    main()
