# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Prompts used by the chain summarizer.

Prompt Engineering References (Anthropic Official):
  - Use XML tags: https://docs.anthropic.com/en/docs/build-with-claude/prompt-engineering/use-xml-tags
  - Long context tips: https://docs.anthropic.com/en/docs/build-with-claude/prompt-engineering/long-context-tips

The prompt handed to the summarization handler is built from three parts:

    <instructions>...</instructions>   one of the three variants below
    <tasks>...</tasks>                  human messages (context or subject)
    <messages>...</messages>            AI and tool messages to summarize

Which variant is used depends on which of the two message groups is present.
"""

from chainsum.chain.ast import SUMMARIZATION_TOOL_NAME

NOTHING_TO_SUMMARIZE = "nothing to summarize"

SUMMARIZER_SYSTEM_PROMPT = (
    "You are a context summarization assistant. You receive parts of a conversation "
    "between a user and an AI agent wrapped in XML tags, together with instructions.\n\n"
    "Do NOT continue the conversation. Do NOT respond to any questions in the "
    "conversation. ONLY output the summary requested by the instructions."
)

_PREVIOUSLY_SUMMARIZED = f"""
HANDLING PREVIOUSLY SUMMARIZED CONTENT:
When you encounter a sequence of messages where:
1. A message contains <tool_call name="{SUMMARIZATION_TOOL_NAME}"> 
2. Followed by a message with role="tool" containing execution history

This pattern is a crucial signal - it means you're looking at ALREADY summarized information. When you see this:
1. MUST treat this summarized content as HIGH PRIORITY
2. Extract and PRESERVE the key technical details (commands, parameters, errors, results)
3. Integrate this information into your new summary without duplicating
4. Understand that this summary already represents multiple previous interactions and essential technical details
"""

# Human messages give context, AI messages are summarized.
CONTEXTUAL_SUMMARY_INSTRUCTIONS = f"""
SUMMARIZATION TASK: Create a concise summary of AI responses while preserving essential information from the conversation context.

DATA STRUCTURE:
- <tasks> contains user queries that provide critical context for understanding AI responses
- <messages> contains AI responses that need to be summarized
{_PREVIOUSLY_SUMMARIZED}
KEY REQUIREMENTS:
1. Preserve ALL technical details: function names, parameters, file paths, URLs, versions, numerical values
2. Maintain complete code examples that demonstrate implementation
3. Keep intact any step-by-step instructions or procedures
4. Ensure the summary directly addresses the user queries found in <tasks>
5. Organize information in a logical flow that matches the problem-solution structure
6. NEVER include context in the summary, just the summarized content, use context only to understand the <messages>
"""

# AI messages only.
STANDALONE_SUMMARY_INSTRUCTIONS = f"""
SUMMARIZATION TASK: Distill standalone AI responses into a comprehensive yet concise summary.

DATA STRUCTURE:
- <messages> contains AI responses that need to be summarized without user context
{_PREVIOUSLY_SUMMARIZED}
KEY REQUIREMENTS:
1. Ensure the summary is self-contained and provides complete context
2. Preserve ALL technical details: function names, parameters, file paths, URLs, versions, numerical values
3. Maintain complete code examples that demonstrate implementation
4. Identify and prioritize main conclusions, recommendations, and technical explanations
5. Organize information in a logical, sequential structure
"""

# Human messages only.
TASKS_SUMMARY_INSTRUCTIONS = """
SUMMARIZATION TASK: Extract key requirements and context from user queries.

DATA STRUCTURE:
- <tasks> contains user messages that need to be summarized

KEY REQUIREMENTS:
1. Identify primary goals, questions, and objectives expressed by the user
2. Preserve ALL technical specifications: function names, parameters, file paths, URLs, versions
3. Maintain all constraints, requirements, and success criteria mentioned
4. Capture the complete problem context and any background information provided
5. Organize requirements in order of stated or implied priority
6. USE directive forms and imperative mood for better translate original text
"""
