"""应用层 - 用例编排

Application 层职责：
1. 用例编排：协调 Domain 实体、Repository、Domain Service
2. 输入输出转换：接收输入参数，返回结果

已实现的用例：
- OpenWorkflowEditorUseCase: 加载 → 迁移 → 打开编辑会话
- SaveWorkflowDraftUseCase: 校验 → 保存 → 重建编辑会话
- ValidateWorkflowDocumentUseCase: 迁移并校验原始文档
"""
