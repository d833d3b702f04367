"""Daily update rules for one individual: host state, drugs, mortality, bacteria and progression."""