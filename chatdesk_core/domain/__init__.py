"""领域层模型与协议。

包含：
- models: ChatMessage / ChatRequest / ChatResult 等统一模型。
- conversation: 会话模型及 ConversationStore 抽象。
- exceptions: 业务异常类型定义。
"""
