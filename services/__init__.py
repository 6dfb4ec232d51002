"""
服務層

這個 package 包含純計算 / 查詢邏輯，不負責狀態轉換：
- SequenceService：每場遊戲的下一個序號
- ValidationService：名單與 enum 驗證
- GameViewService：overlay 輪詢用的合併狀態
- PlayerService：玩家註冊與修改
"""
