"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- GameManager：管理遊戲的生命週期與座位
- EventLedger：每場遊戲的事件紀錄與撤銷
- Locks：並發控制工具
- Exceptions：業務異常
"""
